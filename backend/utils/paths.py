import os
import sys
from pathlib import Path

APP_DIR_NAME = "Aribeth"


def _app_data_dir() -> Path:
    app_data = os.getenv("LOCALAPPDATA") or os.getenv("APPDATA") or os.path.expanduser("~")
    return Path(app_data) / APP_DIR_NAME


def is_frozen() -> bool:
    return getattr(sys, "frozen", False) or "__compiled__" in globals()


def get_app_dir() -> Path:
    """Directory the application runs from (next to the executable when frozen)"""
    if is_frozen():
        return Path(sys.executable).parent
    return Path(__file__).parent.parent


def get_writable_dir(sub_dir: str = "logs") -> Path:
    """Get a writable directory path, standardizing on AppData or local files."""
    override = os.getenv("ARIBETH_HOME")
    if override:
        base_dir = Path(override)
    elif is_frozen():
        base_dir = _app_data_dir()
    else:
        # Resolve relative to the backend root (parent of 'utils')
        base_dir = Path(__file__).parent.parent

    target_dir = base_dir / sub_dir

    try:
        target_dir.mkdir(parents=True, exist_ok=True)
        # Test write access
        test_file = target_dir / ".write_test"
        test_file.touch()
        test_file.unlink()
        return target_dir
    except (PermissionError, OSError):
        # Fallback to AppData if local write fails
        if not override and not is_frozen():
            target_dir = _app_data_dir() / sub_dir
            target_dir.mkdir(parents=True, exist_ok=True)
            return target_dir
        raise
