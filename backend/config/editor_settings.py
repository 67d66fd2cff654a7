"""
Editor configuration

Settings are read, in order of precedence, from:
1. Environment variables (a .env file is loaded first)
2. settings.json in the writable application folder
3. Built-in defaults
"""
import os
import json
from pathlib import Path
from typing import Optional, Dict, Any, Union
from dotenv import load_dotenv
from loguru import logger

# Load environment variables
load_dotenv()

from utils.paths import get_writable_dir

# Centralized writable paths
BASE_WRITABLE_DIR = get_writable_dir("")
USER_SETTINGS_PATH = BASE_WRITABLE_DIR / "settings.json"

_TRUE_VALUES = {'1', 'true', 'yes', 'on'}
_FALSE_VALUES = {'0', 'false', 'no', 'off'}


def _env_flag(name: str) -> Optional[bool]:
    value = os.getenv(name)
    if value is None:
        return None
    value = value.strip().lower()
    if value in _TRUE_VALUES:
        return True
    if value in _FALSE_VALUES:
        return False
    logger.warning(f"Ignoring {name}={value!r}: expected true/false")
    return None


class EditorSettings:
    """
    Editor settings.

    strict_2da_header: refuse 2DA files whose first line lacks the 2DA signature
    nwn_tlk_path: location of the nwn_tlk converter, if known
    """

    def __init__(self, settings_path: Optional[Path] = None):
        self.settings_path = Path(settings_path) if settings_path else USER_SETTINGS_PATH
        self.strict_2da_header = True
        self.nwn_tlk_path: Optional[Path] = None
        self._load_config()

    def _load_config(self):
        """Load configuration from the settings file, then let the environment override it."""
        if self.settings_path.exists():
            try:
                with open(self.settings_path, 'r', encoding='utf-8') as f:
                    settings = json.load(f)
                if 'strict_2da_header' in settings:
                    self.strict_2da_header = bool(settings['strict_2da_header'])
                if settings.get('nwn_tlk_path'):
                    self.nwn_tlk_path = Path(settings['nwn_tlk_path'])
            except (json.JSONDecodeError, OSError) as e:
                logger.warning(f"Ignoring unreadable settings file {self.settings_path}: {e}")

        strict = _env_flag('ARIBETH_STRICT_2DA_HEADER')
        if strict is not None:
            self.strict_2da_header = strict

        env_tool = os.getenv('NWN_TLK_PATH')
        if env_tool:
            self.nwn_tlk_path = Path(env_tool)

    def to_dict(self) -> Dict[str, Any]:
        return {
            'strict_2da_header': self.strict_2da_header,
            'nwn_tlk_path': str(self.nwn_tlk_path) if self.nwn_tlk_path else None,
        }

    def save(self) -> bool:
        """Save current settings to file"""
        self.settings_path.parent.mkdir(parents=True, exist_ok=True)
        try:
            with open(self.settings_path, 'w', encoding='utf-8') as f:
                json.dump(self.to_dict(), f, indent=2)
            return True
        except OSError as e:
            logger.error(f"Failed to save settings to {self.settings_path}: {e}")
            return False

    def set_nwn_tlk_path(self, path: Union[str, Path]) -> bool:
        """Remember the converter location. Rejects paths that are not files."""
        path_obj = Path(path)
        if not path_obj.is_file():
            return False

        self.nwn_tlk_path = path_obj
        return self.save()
