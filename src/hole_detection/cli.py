"""Command line interface for running the hole detector on a stored frame."""

import argparse
import json
import sys
from pathlib import Path
from typing import List, Optional

import numpy as np

from .config import get_default_config, load_config
from .detector import HoleDetector
from .exceptions import HoleDetectionError
from .utils.logging_utils import get_logger, setup_logging

logger = get_logger(__name__)


def load_frame(frame_path: Path):
    """Load ``points``, ``plane`` and ``hull_indices`` from an ``.npz`` file."""
    with np.load(frame_path) as data:
        missing = [key for key in ("points", "plane", "hull_indices") if key not in data]
        if missing:
            raise HoleDetectionError(f"Frame file is missing arrays: {', '.join(missing)}",
                                     {"path": str(frame_path)})
        return data["points"], data["plane"], data["hull_indices"].astype(np.int64)


def main(argv: Optional[List[str]] = None) -> int:
    """Command line interface."""
    parser = argparse.ArgumentParser(description="Detect depth holes on a planar table surface")
    parser.add_argument("frame", help="Frame file (.npz with points, plane and hull_indices)")
    parser.add_argument("-c", "--config", help="Configuration file (JSON, YAML or TOML)")
    parser.add_argument("-o", "--output", help="Write the result as JSON to this file")
    parser.add_argument("-v", "--verbose", action="store_true", help="Enable debug logging")
    parser.add_argument("--debug", action="store_true", help="Save debug masks")
    parser.add_argument("--debug-dir", default="debug", help="Directory for debug masks (default: debug)")

    args = parser.parse_args(argv)

    try:
        config = load_config(args.config) if args.config else get_default_config()
    except HoleDetectionError as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1

    setup_logging(
        level="DEBUG" if args.verbose else config.logging.level,
        log_file=config.logging.log_file,
        use_rich=config.logging.use_rich,
        format_style=config.logging.format_style,
    )

    if args.debug:
        debug_settings = {
            "save_debug_images": True,
            "debug_output_dir": config.hole_detection.debug_output_dir or args.debug_dir,
        }
        config = config.model_copy(
            update={"hole_detection": config.hole_detection.model_copy(update=debug_settings)}
        )
    logger.debug(f"Detector settings: {config.to_flat_dict()}")

    frame_path = Path(args.frame)
    try:
        points, plane, hull_indices = load_frame(frame_path)
        detector = HoleDetector(config.hole_detection)
        result = detector.process(points, plane=plane, hull_indices=hull_indices,
                                  frame_id=frame_path.stem)
    except (HoleDetectionError, OSError) as e:
        logger.error(f"Hole detection failed for {frame_path}: {e}")
        return 1

    payload = json.dumps(result.to_dict(), indent=2)
    if args.output:
        output_path = Path(args.output)
        output_path.parent.mkdir(parents=True, exist_ok=True)
        output_path.write_text(payload, encoding="utf-8")
        logger.info(f"Wrote {len(result.outlines)} holes to {output_path}")
    else:
        print(payload)
    return 0


if __name__ == "__main__":
    sys.exit(main())
