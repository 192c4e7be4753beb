"""
Memory Bender configuration
"""
from pathlib import Path
import os

# Images larger than this are rejected by the image store
MAX_IMAGE_BYTES = 5 * 1024 * 1024

DEFAULT_USER = "me"
DEFAULT_LOG_LEVEL = "WARNING"


def get_project_root() -> Path:
    """Project root - can be overridden with MEMORYBENDER_ROOT."""
    return Path(os.environ.get('MEMORYBENDER_ROOT', Path.home() / 'MemoryBender'))


def get_data_dir() -> Path:
    data_dir = get_project_root() / ".memorybender"
    data_dir.mkdir(parents=True, exist_ok=True)
    return data_dir


def get_db_path() -> str:
    return str(get_data_dir() / "memorybender.db")


def get_images_dir() -> Path:
    images_dir = get_data_dir() / "images"
    images_dir.mkdir(parents=True, exist_ok=True)
    return images_dir


def get_default_user() -> str:
    return os.environ.get('MEMORYBENDER_USER', DEFAULT_USER)


def get_log_level() -> str:
    return os.environ.get('MEMORYBENDER_LOG_LEVEL', DEFAULT_LOG_LEVEL).upper()
