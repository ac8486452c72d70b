"""Point-to-plane distances, projections and the plane coordinate frame."""

import math
from typing import Optional

import numpy as np

from ..frame import PlaneModel

# Normals closer than this to the sensor z axis are used without a constructed
# in-plane reference direction.
_AXIS_ALIGNED_ANGLE = math.radians(0.5)
_EPS = float(np.finfo(np.float32).eps)


def point_to_plane_distance(points: np.ndarray, plane: PlaneModel) -> np.ndarray:
    """Absolute distance of each point in ``points`` (``(N, 3)`` or ``(3,)``) to the plane."""
    plane = plane.normalized()
    points = np.asarray(points, dtype=np.float64)
    return np.abs(points @ plane.normal + plane.d)


def project_points_orthogonal(points: np.ndarray, plane: PlaneModel) -> np.ndarray:
    """Orthogonally project ``(N, 3)`` points onto the plane."""
    plane = plane.normalized()
    points = np.asarray(points, dtype=np.float64).reshape(-1, 3)
    signed = points @ plane.normal + plane.d
    return points - signed[:, None] * plane.normal[None, :]


def project_point_perspective(point: np.ndarray, plane: PlaneModel) -> Optional[np.ndarray]:
    """Project a point onto the plane along the viewing ray through the sensor origin.

    Returns:
        The intersection of the ray with the plane, or None if the ray is
        parallel to the plane or the plane contains the sensor origin
    """
    plane = plane.normalized()
    point = np.asarray(point, dtype=np.float64)
    denom = float(point @ plane.normal)
    if abs(denom) < _EPS or abs(plane.d) < _EPS:
        return None
    scale = -plane.d / denom
    if not math.isfinite(scale):
        return None
    return point * scale


def plane_transformation(plane: PlaneModel, origin: np.ndarray) -> np.ndarray:
    """Rigid 4x4 transform into a frame whose z axis is the plane normal.

    ``origin`` becomes the frame origin. The in-plane y axis is the sensor y
    axis when the normal (nearly) coincides with the sensor z axis; otherwise
    it is an arbitrary unit vector orthogonal to the normal.
    """
    normal = plane.unit_normal
    cos_angle = float(np.clip(normal[2], -1.0, 1.0))
    angle = math.acos(cos_angle)
    if abs(angle - math.pi) < angle:
        angle = abs(angle - math.pi)

    if angle < _AXIS_ALIGNED_ANGLE:
        ortho = np.array([0.0, 1.0, 0.0])
    else:
        nx, ny, nz = normal
        if abs(nz) > _EPS:
            ortho = np.array([1.0, 1.0, -(nx + ny) / nz])
        elif abs(ny) > _EPS:
            ortho = np.array([1.0, -nx / ny, 1.0])
        else:
            ortho = np.array([0.0, 1.0, 1.0])
        ortho /= np.linalg.norm(ortho)

    x_axis = np.cross(ortho, normal)
    x_axis /= np.linalg.norm(x_axis)
    y_axis = np.cross(normal, x_axis)
    y_axis /= np.linalg.norm(y_axis)

    rotation = np.vstack([x_axis, y_axis, normal])
    transform = np.eye(4)
    transform[:3, :3] = rotation
    transform[:3, 3] = -rotation @ np.asarray(origin, dtype=np.float64)
    return transform


def to_plane_coordinates(points: np.ndarray, plane: PlaneModel) -> np.ndarray:
    """Express ``(N, 3)`` points (already on the plane) as ``(N, 2)`` in-plane coordinates."""
    points = np.asarray(points, dtype=np.float64).reshape(-1, 3)
    transform = plane_transformation(plane, points.mean(axis=0))
    local = points @ transform[:3, :3].T + transform[:3, 3]
    return local[:, :2]
