"""Configuration management for the saliency overlay toolkit."""

import os

from dotenv import load_dotenv
from pydantic import Field
from pydantic_settings import BaseSettings

# Load environment variables
load_dotenv()


class Config(BaseSettings):
    """Configuration class for the saliency overlay toolkit."""

    # Logging
    log_level: str = Field(default="INFO")
    log_to_file: bool = Field(default=True, description="Write rotating log files under log_dir")
    log_dir: str = Field(default="logs")

    # Overlay presentation
    heat_map_opacity: float = Field(default=0.5, description="Opacity of the heat-map layer")
    bounding_box_stroke_color: tuple[int, int, int] = Field(default=(255, 147, 0))  # RGB, orange
    bounding_box_line_width: int = Field(default=2)

    # Saliency analysis
    saliency_mask_size: int = Field(default=68, description="Side length of the low-resolution mask")
    max_salient_objects: int = Field(default=3, description="Upper bound of boxes in objectness mode")
    min_salient_area_fraction: float = Field(default=0.01)
    analysis_workers: int = Field(default=1)

    # Pixel buffers
    max_buffer_pixels: int = Field(default=64_000_000)
    pixel_buffer_row_alignment: int = Field(default=64)  # bytes

    # Debug output
    save_overlay_debug: bool = Field(default=False)
    overlay_debug_dir: str = Field(default="overlay_debug")

    class Config:
        """Pydantic configuration for environment loading."""

        env_file = ".env"
        env_prefix = "SALIENCY_"
        case_sensitive = False
        extra = "ignore"

    def validate_config(self) -> bool:
        """Validate configuration values."""
        if not 0 <= self.heat_map_opacity <= 1:
            raise ValueError("Heat map opacity must be between 0 and 1")

        if self.saliency_mask_size <= 0:
            raise ValueError("Saliency mask size must be positive")

        if self.max_salient_objects <= 0:
            raise ValueError("Max salient objects must be positive")

        if not 0 <= self.min_salient_area_fraction < 1:
            raise ValueError("Min salient area fraction must be in [0, 1)")

        if self.pixel_buffer_row_alignment <= 0 or self.pixel_buffer_row_alignment % 4:
            raise ValueError("Pixel buffer row alignment must be a positive multiple of 4")

        if any(not 0 <= channel <= 255 for channel in self.bounding_box_stroke_color):
            raise ValueError("Stroke colour channels must be between 0 and 255")

        return True

    def get_overlay_debug_path(self) -> str:
        """Get the full path to the overlay debug directory."""
        return os.path.join(os.getcwd(), self.overlay_debug_dir)


# Global configuration instance
config = Config()
