"""
Adapter for the external nwn_tlk converter

Binary talk tables are never read here; nwn_tlk converts them to and from
JSON (or legacy text) and this module only builds its command lines, runs
it and reports failures.
"""

import os
import shutil
import subprocess
from pathlib import Path
from typing import List, Optional, Sequence, Tuple, Union, TYPE_CHECKING

from loguru import logger

from utils.paths import get_app_dir

if TYPE_CHECKING:
    from config.editor_settings import EditorSettings

TOOL_NAMES = ('nwn_tlk.exe', 'nwn_tlk') if os.name == 'nt' else ('nwn_tlk', 'nwn_tlk.exe')

PathLike = Union[str, Path]


class TLKToolError(RuntimeError):
    """Raised when the converter exits with an error"""

    def __init__(self, message: str, exit_code: Optional[int] = None, output: str = ''):
        super().__init__(message)
        self.exit_code = exit_code
        self.output = output


class TLKToolNotFoundError(TLKToolError):
    """Raised when no converter executable can be located"""
    pass


def _candidate_paths(app_dir: Path) -> List[Path]:
    candidates = []
    for name in TOOL_NAMES:
        candidates.append(app_dir / name)
        candidates.append(app_dir / 'plugins' / name)
        candidates.append((app_dir / '..' / 'plugins' / name).resolve())
    return candidates


class NwnTlkTool:
    """Runs nwn_tlk with the argument sets the editor needs"""

    def __init__(self, executable: PathLike, timeout: Optional[float] = 300):
        self.executable = Path(executable)
        self.timeout = timeout

    @classmethod
    def resolve(cls, settings: Optional['EditorSettings'] = None,
                app_dir: Optional[Path] = None) -> 'NwnTlkTool':
        """
        Locate the converter: configured path first, then next to the
        application, its plugins folders, and finally PATH.
        """
        if settings is not None and settings.nwn_tlk_path:
            if settings.nwn_tlk_path.is_file():
                return cls(settings.nwn_tlk_path)
            logger.warning(f"Configured nwn_tlk path does not exist: {settings.nwn_tlk_path}")

        for candidate in _candidate_paths(app_dir or get_app_dir()):
            if candidate.is_file():
                return cls(candidate)

        for name in TOOL_NAMES:
            found = shutil.which(name)
            if found:
                return cls(found)

        raise TLKToolNotFoundError("nwn_tlk not found")

    def run(self, args: Sequence[str], label: str) -> Tuple[int, str]:
        """Run the converter; returns (exit code, combined stdout/stderr)"""
        command = [str(self.executable), *args]
        logger.debug(f"Running: {' '.join(command)}")
        try:
            result = subprocess.run(
                command,
                capture_output=True,
                text=True,
                timeout=self.timeout,
            )
        except FileNotFoundError as e:
            raise TLKToolNotFoundError(f"nwn_tlk not found at {self.executable}") from e
        except subprocess.TimeoutExpired as e:
            raise TLKToolError(f"{label} timed out after {self.timeout}s") from e

        output = '\n'.join(part.strip() for part in (result.stdout, result.stderr) if part and part.strip())
        if output:
            logger.info(output)
        return result.returncode, output

    def _run_checked(self, args: Sequence[str], label: str) -> str:
        exit_code, output = self.run(args, label)
        if exit_code != 0:
            logger.error(f"{label} failed (exit code {exit_code}).")
            raise TLKToolError(f"{label} failed (exit code {exit_code})", exit_code, output)
        return output

    def tlk_to_json(self, tlk_path: PathLike, json_path: PathLike, pretty: bool = False) -> str:
        mode = '--pretty' if pretty else '--quiet'
        return self._run_checked(
            ['-i', str(tlk_path), '-l', 'tlk', '-o', str(json_path), '-k', 'json', mode],
            'export json',
        )

    def json_to_tlk(self, json_path: PathLike, tlk_path: PathLike) -> str:
        return self._run_checked(
            ['-i', str(json_path), '-l', 'json', '-o', str(tlk_path), '-k', 'tlk', '--quiet'],
            'import json',
        )

    def text_to_tlk(self, user_text_path: PathLike, base_text_path: PathLike, tlk_path: PathLike) -> str:
        """
        Import a legacy text table. Converter builds differ in the flags
        they accept, so module-id and raw-id variants are tried in turn.
        """
        attempts = [
            (['-i', str(user_text_path), '-o', str(tlk_path), '-j', 'text', '-k', 'tlk', '-u'], 'import user'),
            (['-i', str(base_text_path), '-o', str(tlk_path), '-j', 'text', '-k', 'tlk', '-b'], 'import base'),
            (['-i', str(user_text_path), '-o', str(tlk_path), '-j', 'text', '-k', 'tlk'], 'import user (no flag)'),
            (['-i', str(base_text_path), '-o', str(tlk_path), '-j', 'text', '-k', 'tlk'], 'import base (no flag)'),
        ]

        exit_code, output = None, ''
        for args, label in attempts:
            exit_code, output = self.run(args, label)
            if exit_code == 0:
                return output
            logger.warning(f"{label} attempt failed (exit code {exit_code}).")

        raise TLKToolError("TLK import failed", exit_code, output)
