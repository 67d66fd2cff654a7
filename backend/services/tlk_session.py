"""
TLK editing session

Entries are edited in memory. Binary .tlk files are read and written through
the nwn_tlk converter, with converter JSON as the interchange format; the last
JSON root is kept so export preserves fields the editor does not model.
"""

import tempfile
from datetime import datetime
from pathlib import Path
from typing import Any, Dict, List, Optional, Union

from loguru import logger
from pydantic import TypeAdapter

from parsers.tlk_json import build_tlk_json, parse_tlk_json
from parsers.tlk_text import TLKEntry, parse_tlk_text, serialize_tlk_text
from .edit_history import EditHistory
from .tlk_tool import NwnTlkTool

_ENTRY_LIST = TypeAdapter(List[TLKEntry])

EDITABLE_FIELDS = ('index', 'text', 'sound_resref', 'duration')


class TLKEditSession:
    """One open talk table with undo/redo"""

    def __init__(self):
        self.entries: List[TLKEntry] = []
        self.root: Optional[Dict[str, Any]] = None
        self.history = EditHistory()
        self.file_path: Optional[Path] = None

        self.is_dirty = False
        self.last_loaded: Optional[datetime] = None

    def _snapshot(self) -> str:
        return _ENTRY_LIST.dump_json(self.entries).decode('utf-8')

    def _loaded(self):
        # In-memory loads are not tied to a .tlk file; open_tlk sets it afterwards
        self.file_path = None
        self.history.reset(self._snapshot())
        self.is_dirty = False
        self.last_loaded = datetime.now()

    def load_json(self, raw_json: str) -> List[TLKEntry]:
        """Load converter JSON. Raises TLKJsonError for malformed JSON."""
        imported = parse_tlk_json(raw_json)
        self.entries = imported.entries
        self.root = imported.root
        self._loaded()
        logger.info(f"Loaded {len(self.entries)} TLK entries from JSON")
        return self.entries

    def load_text(self, raw_text: str) -> List[TLKEntry]:
        """Load a text table. A previously loaded JSON root is kept for export."""
        self.entries = parse_tlk_text(raw_text)
        self._loaded()
        logger.info(f"Loaded {len(self.entries)} TLK entries from text")
        return self.entries

    def capture_snapshot(self) -> bool:
        changed = self.history.push(self._snapshot())
        if changed:
            self.is_dirty = True
        return changed

    def _restore(self, snapshot: Optional[str]) -> bool:
        if snapshot is None:
            return False
        self.entries = _ENTRY_LIST.validate_json(snapshot)
        self.is_dirty = True
        return True

    def undo(self) -> bool:
        return self._restore(self.history.undo())

    def redo(self) -> bool:
        return self._restore(self.history.redo())

    @property
    def can_undo(self) -> bool:
        return self.history.can_undo

    @property
    def can_redo(self) -> bool:
        return self.history.can_redo

    def update_entry(self, position: int, **fields) -> TLKEntry:
        """
        Change one entry and record the edit.

        Args:
            position: list position of the entry
            **fields: any of index, text, sound_resref, duration
        """
        unknown = set(fields) - set(EDITABLE_FIELDS)
        if unknown:
            raise ValueError(f"Unknown TLK entry field(s): {', '.join(sorted(unknown))}")

        entry = self.entries[position]
        for name, value in fields.items():
            setattr(entry, name, value)
        entry.recalculate_length()
        self.capture_snapshot()
        return entry

    def to_json(self) -> str:
        return build_tlk_json(self.entries, self.root)

    def to_text(self, use_base_indices: bool = False) -> str:
        return serialize_tlk_text(self.entries, use_base_indices=use_base_indices)

    def open_tlk(self, tlk_path: Union[str, Path], tool: NwnTlkTool) -> List[TLKEntry]:
        """Convert a binary talk table to JSON with nwn_tlk and load it"""
        path = Path(tlk_path)
        with tempfile.TemporaryDirectory(prefix='aribeth_tlk_') as temp_dir:
            json_path = Path(temp_dir) / f"{path.stem}.json"
            tool.tlk_to_json(path, json_path)
            raw_json = json_path.read_text(encoding='utf-8-sig')

        entries = self.load_json(raw_json)
        self.file_path = path
        return entries

    def save_tlk(self, tlk_path: Optional[Union[str, Path]], tool: NwnTlkTool) -> Path:
        """Export the entries to JSON and have nwn_tlk build the binary table"""
        target = Path(tlk_path) if tlk_path else self.file_path
        if target is None:
            raise ValueError("No file path to save to")

        with tempfile.TemporaryDirectory(prefix='aribeth_tlk_') as temp_dir:
            json_path = Path(temp_dir) / f"{target.stem}.json"
            json_path.write_text(self.to_json(), encoding='utf-8')
            tool.json_to_tlk(json_path, target)

        self.file_path = target
        self.is_dirty = False
        logger.info(f"Saved TLK {target.name} ({len(self.entries)} entries)")
        return target
