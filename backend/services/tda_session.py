"""
2DA editing session

Holds one open 2DA document with its undo/redo history. Snapshots are the
serialized text of the document, taken after column widths are refreshed,
so undoing restores the exact layout the user saw.
"""

from datetime import datetime
from pathlib import Path
from typing import Optional, Union

from loguru import logger

from parsers.tda import TDADocument, TDAFormatError, TDAParser, looks_like_2da
from .edit_history import EditHistory


class TDAEditSession:
    """
    One open 2DA document

    Edits are made directly on `document`; call capture_snapshot() after
    each edit to make it undoable.
    """

    def __init__(self, strict_header: Optional[bool] = None, settings=None):
        if strict_header is None:
            if settings is None:
                from config.editor_settings import EditorSettings
                settings = EditorSettings()
            strict_header = settings.strict_2da_header

        self.parser = TDAParser(strict_header=strict_header)
        self.history = EditHistory()
        self.document: Optional[TDADocument] = None
        self.file_path: Optional[Path] = None

        self.is_dirty = False
        self.last_loaded: Optional[datetime] = None

    @property
    def strict_header(self) -> bool:
        return self.parser.strict_header

    def open(self, file_path: Union[str, Path]) -> TDADocument:
        """
        Load a 2DA file.

        Raises:
            TDAFormatError: in strict mode, the first line is not a 2DA version line
        """
        path = Path(file_path)
        text = path.read_text(encoding='utf-8-sig')
        if self.strict_header and not looks_like_2da(text):
            raise TDAFormatError(f"{path.name} does not look like a 2DA file")

        document = self.load_text(text)
        self.file_path = path
        logger.info(f"Loaded 2DA {path.name}: {len(document.columns)} columns, {document.row_count} rows")
        return document

    def load_text(self, text: str) -> TDADocument:
        document = self.parser.parse(text)
        self.parser.refresh_widths(document)

        self.document = document
        self.file_path = None
        self.history.reset(self.parser.serialize(document))
        self.is_dirty = False
        self.last_loaded = datetime.now()
        return document

    def _require_document(self) -> TDADocument:
        if self.document is None:
            raise RuntimeError("No 2DA document loaded")
        return self.document

    def capture_snapshot(self) -> bool:
        """Record the current document. Returns False when nothing changed."""
        document = self._require_document()
        self.parser.refresh_widths(document)
        changed = self.history.push(self.parser.serialize(document))
        if changed:
            self.is_dirty = True
        return changed

    def _restore(self, snapshot: Optional[str]) -> bool:
        if snapshot is None:
            return False
        # Restoring never re-checks the header; the snapshot came from this session
        self.document = TDAParser(log=logger.debug).parse(snapshot)
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

    def to_text(self) -> str:
        return self.parser.serialize(self._require_document())

    def save(self, file_path: Optional[Union[str, Path]] = None) -> Path:
        """Write the document as UTF-8 with LF line endings"""
        target = Path(file_path) if file_path else self.file_path
        if target is None:
            raise ValueError("No file path to save to")

        text = self.to_text()
        with open(target, 'w', encoding='utf-8', newline='\n') as f:
            f.write(text)

        self.file_path = target
        self.is_dirty = False
        logger.info(f"Saved 2DA {target.name}")
        return target
