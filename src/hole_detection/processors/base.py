"""Base processor class and debug mask handling shared by detector stages."""

from abc import ABC, abstractmethod
from pathlib import Path
from typing import Any, Dict, List, Optional

import cv2
import numpy as np

from ..exceptions import ValidationError
from ..frame import OrganizedGrid


class BaseProcessor(ABC):
    """Base class for processors working on one organized grid at a time."""

    def __init__(self, config: Optional[Any] = None):
        self.config = config
        self.debug_images: Dict[str, np.ndarray] = {}

    def get_config_value(self, key: str, default: Any) -> Any:
        """Config attribute ``key``, or ``default`` without a config."""
        if self.config is None:
            return default
        return getattr(self.config, key, default)

    @abstractmethod
    def process(self, grid: OrganizedGrid, **kwargs) -> Any:
        """Run the processor on one grid."""

    def validate_grid(self, grid: Any) -> OrganizedGrid:
        """Wrap a raw ``(height, width, 3)`` array, rejecting anything else."""
        if grid is None:
            raise ValidationError("Grid cannot be None")
        if isinstance(grid, OrganizedGrid):
            return grid
        if not isinstance(grid, np.ndarray):
            raise ValidationError("Grid must be a numpy array or OrganizedGrid",
                                  {"type": type(grid).__name__})
        return OrganizedGrid(grid)

    def save_debug_image(self, name: str, mask: np.ndarray) -> None:
        """Keep a mask for later saving if debug output is enabled.

        Boolean masks are stored as 8-bit images (True -> 255).
        """
        if not self.get_config_value('save_debug_images', False):
            return
        if mask.dtype == bool:
            mask = mask_to_image(mask)
        self.debug_images[name] = mask

    def get_debug_images(self) -> Dict[str, np.ndarray]:
        return self.debug_images

    def clear_debug_images(self) -> None:
        self.debug_images = {}

    def save_debug_images_to_dir(self, debug_dir: Path, prefix: str = "") -> List[Path]:
        """Write the stored masks as ``[prefix_]name.<debug_image_format>``.

        Returns:
            Paths of the written files

        Raises:
            OSError: If OpenCV cannot write a file
        """
        if not self.debug_images:
            return []

        debug_dir = Path(debug_dir)
        debug_dir.mkdir(parents=True, exist_ok=True)
        img_format = self.get_config_value('debug_image_format', 'png')

        written = []
        for name, image in self.debug_images.items():
            stem = f"{prefix}_{name}" if prefix else name
            path = debug_dir / f"{stem}.{img_format}"
            if not cv2.imwrite(str(path), image):
                raise OSError(f"Could not write debug mask {path}")
            written.append(path)
        return written


def mask_to_image(mask: np.ndarray) -> np.ndarray:
    """Convert a boolean mask into an 8-bit image (True -> 255)."""
    return mask.astype(np.uint8) * 255
