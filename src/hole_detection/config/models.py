"""
Pydantic models for hole detection configuration.

Defines the configuration schema with validation and defaults for the
detector thresholds, debug output and logging setup.
"""

from enum import Enum
from typing import Any, Dict, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator


class LogLevel(str, Enum):
    """Supported logging levels."""
    DEBUG = "DEBUG"
    INFO = "INFO"
    WARNING = "WARNING"
    ERROR = "ERROR"
    CRITICAL = "CRITICAL"


class HoleDetectionConfig(BaseModel):
    """Thresholds and switches for the per-frame hole detector."""

    min_hole_size: int = Field(
        default=15,
        ge=0,
        description="A hole is reported only if it has more invalid samples than this"
    )
    inside_out_factor: float = Field(
        default=2.0,
        gt=0.0,
        description="A hole is outside the table if #outside > #inside * inside_out_factor"
    )
    plane_dist_threshold: float = Field(
        default=0.02,
        gt=0.0,
        description="Mean border-to-plane distance above which a hole is rejected (meters)"
    )
    min_distance_to_convex_hull: float = Field(
        default=0.05,
        ge=0.0,
        description="Minimal distance to the table hull edges for overlapping holes (meters)"
    )
    overlap_alignment_factor: float = Field(
        default=3.0,
        gt=0.0,
        description="Multiplier on plane_dist_threshold for the overlap alignment check"
    )
    overlap_projection_factor: float = Field(
        default=2.0,
        gt=0.0,
        description="Border points of overlapping holes farther than this multiple of "
                    "plane_dist_threshold are replaced by their plane projection"
    )
    keep_border_touching_removals: bool = Field(
        default=True,
        description="Keep removal indices of holes whose outline touches the image border"
    )
    save_debug_images: bool = Field(
        default=False,
        description="Whether to store debug masks during detection"
    )
    debug_output_dir: Optional[str] = Field(
        default=None,
        description="Directory the debug masks are written to"
    )
    debug_image_format: str = Field(
        default="png",
        pattern="^(png|jpg|jpeg|bmp)$",
        description="File format for debug masks"
    )

    @field_validator('debug_output_dir')
    @classmethod
    def validate_directory_path(cls, v):
        """Normalize the debug directory path."""
        if v is None:
            return v
        if not v.strip():
            raise ValueError("Directory path must be a non-empty string")
        return v.replace('\\', '/')


class LoggingConfig(BaseModel):
    """Configuration for logging setup."""

    level: LogLevel = Field(
        default=LogLevel.INFO,
        description="Base logging level"
    )
    log_file: Optional[str] = Field(
        default=None,
        description="Optional log file path"
    )
    use_rich: bool = Field(
        default=True,
        description="Whether to use rich console output"
    )
    format_style: str = Field(
        default="detailed",
        pattern="^(simple|detailed|minimal)$",
        description="Logging format style"
    )


class Config(BaseModel):
    """Main configuration model."""

    model_config = ConfigDict(
        extra="forbid",
        validate_assignment=True,
        use_enum_values=True,
    )

    hole_detection: HoleDetectionConfig = Field(
        default_factory=HoleDetectionConfig,
        description="Hole detection configuration"
    )
    logging: LoggingConfig = Field(
        default_factory=LoggingConfig,
        description="Logging configuration"
    )

    # Meta configuration
    version: str = Field(
        default="1.0.0",
        description="Configuration version"
    )
    description: Optional[str] = Field(
        default=None,
        description="Configuration description"
    )

    def to_flat_dict(self) -> Dict[str, Any]:
        """Flatten the detector thresholds for log output."""
        return dict(self.hole_detection.model_dump())
