"""
Utility modules for configuration loading, caching and file operations.
"""

from .cache import BoundedCache
from .config_loader import load_config, validate_config
from .file_utils import ensure_directory, save_dataframe
from .warnings_config import configure_warnings, suppress_common_warnings
