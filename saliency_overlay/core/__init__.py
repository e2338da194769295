"""Core components of the saliency overlay toolkit.

``session`` and ``state`` depend on the vision sub-package and are imported
from their modules directly.
"""

from .config import Config, config
from .logger import Logger, log

__all__ = [
    "Config",
    "Logger",
    "config",
    "log",
]
