"""End-to-end tests for hole detection on synthetic table frames."""

import json

import numpy as np
import pytest

from hole_detection import HoleClass, HoleDetector, detect_holes
from hole_detection.cli import main
from hole_detection.config import HoleDetectionConfig
from hole_detection.exceptions import MissingInputError, ValidationError

PLANE = np.array([0.0, 0.0, 1.0, -1.0])


def _blank(points, cols, rows):
    points[rows.start:rows.stop, cols.start:cols.stop] = np.nan
    return points


def _index(col, row, width=100):
    return row * width + col


@pytest.fixture
def inside_frame(plane_points):
    """100x100 table with a 5x5 hole in the middle."""
    return _blank(plane_points(100, 100), range(48, 53), range(48, 53))


def test_inside_hole(inside_frame, full_grid_hull):
    result = detect_holes(inside_frame, PLANE, full_grid_hull)

    assert len(result.outlines) == 1
    outline = result.outlines[0]
    assert outline.label == HoleClass.INSIDE
    assert outline.hole_size == 25
    np.testing.assert_allclose(outline.points[:, 2], 1.0)

    border = {_index(c, r) for c in range(48, 53) for r in (47, 53)}
    border |= {_index(c, r) for c in (47, 53) for r in range(48, 53)}
    removed = result.removal_indices.tolist()
    assert set(removed) <= border
    assert removed == sorted(set(removed))

    assert result.stats["holes_found"] == 1
    assert result.stats["inside"] == 1
    assert result.stats["holes_accepted"] == 1
    assert result.stats["holes_rejected"] == 0


def test_inside_hole_with_island(plane_points, full_grid_hull):
    points = _blank(plane_points(100, 100), range(40, 61), range(40, 61))
    points[45:56, 45:56] = plane_points(100, 100)[45:56, 45:56]

    result = detect_holes(points, PLANE, full_grid_hull)

    assert len(result.outlines) == 1
    assert result.outlines[0].hole_size == 21 * 21 - 11 * 11
    removed = set(result.removal_indices.tolist())
    island = {_index(c, r) for c in range(46, 55) for r in range(46, 55)}
    assert island <= removed


def test_fully_valid_frame(plane_points, full_grid_hull):
    result = detect_holes(plane_points(100, 100), PLANE, full_grid_hull)
    assert result.outlines == []
    assert result.removal_indices.shape == (0,)
    assert result.stats["holes_found"] == 0


def test_small_hole_ignored(plane_points, full_grid_hull):
    points = _blank(plane_points(100, 100), range(48, 51), range(48, 53))
    result = detect_holes(points, PLANE, full_grid_hull)
    assert result.stats["holes_found"] == 0


def test_hole_not_on_plane(inside_frame, full_grid_hull):
    inside_frame[30:71, 30:71, 2] += 0.2

    result = detect_holes(inside_frame, PLANE, full_grid_hull)

    assert result.outlines == []
    assert result.removal_indices.shape == (0,)
    assert result.stats["rejections"]["plane_alignment"] == 1


def test_overlap_hole_accepted(plane_points, inner_hull):
    points = _blank(plane_points(100, 100), range(8, 21), range(40, 51))

    result = detect_holes(points, PLANE, inner_hull)

    assert result.stats["overlap"] == 1
    assert len(result.outlines) == 1
    outline = result.outlines[0]
    assert outline.label == HoleClass.OVERLAP
    assert outline.hole_size == 13 * 11
    np.testing.assert_allclose(outline.points[:, 2], 1.0)


def test_overlap_hole_at_table_edge(plane_points, inner_hull):
    points = _blank(plane_points(100, 100), range(8, 13), range(40, 51))

    result = detect_holes(points, PLANE, inner_hull)

    assert result.stats["overlap"] == 1
    assert result.outlines == []
    assert result.removal_indices.shape == (0,)
    assert result.stats["rejections"]["edge_artifact"] == 1


def test_overlap_hole_off_plane_outside_table(plane_points, inner_hull):
    """Border samples beyond the table edge do not count for alignment."""
    points = _blank(plane_points(100, 100), range(8, 21), range(40, 51))
    points[:, :10, 2] = 1.5

    result = detect_holes(points, PLANE, inner_hull)

    assert len(result.outlines) == 1
    np.testing.assert_allclose(result.outlines[0].points[:, 2], 1.0)


def test_outside_hole(plane_points, inner_hull):
    points = _blank(plane_points(100, 100), range(2, 12), range(40, 51))

    result = detect_holes(points, PLANE, inner_hull)

    assert result.stats["outside"] == 1
    assert result.stats["rejections"]["outside"] == 1
    assert result.outlines == []
    assert result.removal_indices.shape == (0,)


@pytest.fixture
def border_frame(plane_points):
    """Hole ring touching the left image border around a valid island."""
    points = _blank(plane_points(100, 100), range(0, 9), range(40, 53))
    points[44:49, 2:5] = plane_points(100, 100)[44:49, 2:5]
    return points


def test_border_touching_hole_keeps_removals(border_frame, full_grid_hull):
    result = detect_holes(border_frame, PLANE, full_grid_hull)

    assert result.outlines == []
    assert result.stats["rejections"]["touches_border"] == 1
    removed = set(result.removal_indices.tolist())
    assert {_index(3, 45), _index(3, 46), _index(3, 47)} <= removed


def test_border_touching_hole_retracts_removals(border_frame, full_grid_hull):
    config = HoleDetectionConfig(keep_border_touching_removals=False)

    result = detect_holes(border_frame, PLANE, full_grid_hull, config=config)

    assert result.outlines == []
    assert result.removal_indices.shape == (0,)


def test_hole_touching_top_row(plane_points, full_grid_hull):
    """Row 0 lies outside the hull polygon, so a hole reaching it overlaps the table edge."""
    points = _blank(plane_points(100, 100), range(40, 53), range(0, 9))

    result = detect_holes(points, PLANE, full_grid_hull)

    assert result.stats["overlap"] == 1
    assert result.outlines == []
    assert result.stats["rejections"]["touches_border"] == 1
    assert "edge_artifact" not in result.stats["rejections"]


def test_degenerate_hole_does_not_stop_frame(plane_points, full_grid_hull):
    """A hole whose border collapses to one point is dropped; the other hole survives."""
    points = _blank(plane_points(100, 100), range(20, 25), range(20, 25))
    points[60:80, 60:80] = (0.0, 0.0, 1.0)
    points = _blank(points, range(65, 75), range(65, 75))

    result = detect_holes(points, PLANE, full_grid_hull)

    assert result.stats["holes_found"] == 2
    assert len(result.outlines) == 1
    assert result.outlines[0].hole_size == 25
    assert result.stats["rejections"]["degenerate"] == 1
    assert result.stats["holes_rejected"] == 1
    removed = set(result.removal_indices.tolist())
    assert not removed & {_index(c, r) for c in range(60, 80) for r in range(60, 80)}

def test_overlap_hole_without_projectable_border(plane_points, inner_hull):
    """A plane through the sensor origin leaves off-plane border samples without a projection."""
    origin_plane = np.array([0.0, 0.0, 1.0, 0.0])
    points = plane_points(100, 100, z=0.0)
    points[38:53, 6:23, 2] = 0.05
    points = _blank(points, range(8, 21), range(40, 51))

    result = detect_holes(points, origin_plane, inner_hull)

    assert result.stats["overlap"] == 1
    assert result.outlines == []
    assert result.stats["rejections"]["degenerate"] == 1
    assert "edge_artifact" not in result.stats["rejections"]

def test_several_holes(plane_points, full_grid_hull):
    points = _blank(plane_points(100, 100), range(20, 25), range(20, 25))
    points = _blank(points, range(70, 76), range(60, 66))

    result = detect_holes(points, PLANE, full_grid_hull)

    assert len(result.outlines) == 2
    assert [o.hole_size for o in result.outlines] == [25, 36]
    removed = result.removal_indices
    assert np.all(np.diff(removed) > 0)


def test_repeated_detection(inside_frame, full_grid_hull):
    detector = HoleDetector()
    first = detector.detect(inside_frame, PLANE, full_grid_hull)
    second = detector.detect(inside_frame, PLANE, full_grid_hull)

    np.testing.assert_array_equal(first.removal_indices, second.removal_indices)
    assert len(first.outlines) == len(second.outlines)
    np.testing.assert_array_equal(first.outlines[0].grid_polygon, second.outlines[0].grid_polygon)


@pytest.mark.parametrize("plane,hull", [
    (None, [0, 99, 9999, 9900]),
    (PLANE, None),
    (PLANE, []),
    (PLANE, [-1, 100000]),
])
def test_missing_inputs(inside_frame, plane, hull):
    with pytest.raises(MissingInputError):
        detect_holes(inside_frame, plane, hull)


def test_invalid_grid(full_grid_hull):
    with pytest.raises(ValidationError):
        HoleDetector().process(None, plane=PLANE, hull_indices=full_grid_hull)


def test_debug_masks_written(inside_frame, full_grid_hull, temp_dir):
    config = HoleDetectionConfig(save_debug_images=True, debug_output_dir=str(temp_dir))
    detector = HoleDetector(config)

    detector.process(inside_frame, plane=PLANE, hull_indices=full_grid_hull, frame_id="frame1")

    for name in ("invalid_mask", "hull_mask", "removal_mask"):
        assert (temp_dir / f"frame1_{name}.png").exists()
    assert detector.get_debug_images()["invalid_mask"].shape == (100, 100)


def test_detect_holes_stores_masks_on_processor(inside_frame, full_grid_hull):
    detector = HoleDetector(HoleDetectionConfig(save_debug_images=True))

    detect_holes(inside_frame, PLANE, full_grid_hull, config=detector.config, processor=detector)

    masks = detector.get_debug_images()
    assert set(masks) == {"invalid_mask", "hull_mask", "removal_mask"}
    assert masks["invalid_mask"].dtype == np.uint8
    assert int(masks["invalid_mask"].sum()) == 25 * 255


def test_no_debug_masks_by_default(inside_frame, full_grid_hull):
    detector = HoleDetector()
    detector.process(inside_frame, plane=PLANE, hull_indices=full_grid_hull)
    assert detector.get_debug_images() == {}


class TestCli:
    """Test the command line entry point."""

    @pytest.fixture
    def frame_file(self, inside_frame, full_grid_hull, temp_dir):
        path = temp_dir / "frame.npz"
        np.savez(path, points=inside_frame, plane=PLANE, hull_indices=np.array(full_grid_hull))
        return path

    def test_writes_result(self, frame_file, temp_dir):
        output = temp_dir / "out" / "holes.json"

        assert main([str(frame_file), "-o", str(output)]) == 0

        data = json.loads(output.read_text())
        assert len(data["holes"]) == 1
        assert data["holes"][0]["label"] == "inside"
        assert data["stats"]["holes_found"] == 1

    def test_config_file(self, frame_file, temp_dir):
        config_path = temp_dir / "config.yaml"
        config_path.write_text("hole_detection:\n  min_hole_size: 30\nlogging:\n  use_rich: false\n")
        output = temp_dir / "holes.json"

        assert main([str(frame_file), "-c", str(config_path), "-o", str(output)]) == 0

        assert json.loads(output.read_text())["holes"] == []

    def test_missing_arrays(self, temp_dir):
        path = temp_dir / "broken.npz"
        np.savez(path, points=np.zeros((2, 2, 3)))
        assert main([str(path)]) == 1

    def test_missing_frame_file(self, temp_dir):
        assert main([str(temp_dir / "nothing.npz")]) == 1

    def test_invalid_config(self, frame_file, temp_dir):
        config_path = temp_dir / "config.yaml"
        config_path.write_text("hole_detection:\n  min_hole_size: -3\n")
        assert main([str(frame_file), "-c", str(config_path)]) == 1

    def test_settings_logged_to_file(self, frame_file, temp_dir):
        log_file = temp_dir / "run.log"
        config_path = temp_dir / "config.json"
        config_path.write_text(json.dumps({
            "hole_detection": {"min_hole_size": 20},
            "logging": {"use_rich": False, "log_file": str(log_file)},
        }))

        assert main([str(frame_file), "-c", str(config_path), "-o", str(temp_dir / "holes.json")]) == 0

        log_text = log_file.read_text(encoding="utf-8")
        assert "Detector settings" in log_text
        assert "'min_hole_size': 20" in log_text

    def test_debug_flag_writes_masks(self, frame_file, temp_dir):
        debug_dir = temp_dir / "masks"

        assert main([str(frame_file), "--debug", "--debug-dir", str(debug_dir),
                     "-o", str(temp_dir / "holes.json")]) == 0

        assert (debug_dir / "frame_removal_mask.png").exists()
