"""
2DA (two-dimensional array) text parser and writer

Reads whitespace-aligned 2DA V2.0 tables and writes them back with the
original column alignment. Malformed rows are repaired (padded or folded)
and reported through a log callable instead of failing the load.
"""

import re
from dataclasses import dataclass, field
from pathlib import Path
from typing import Callable, List, Optional, Union

from loguru import logger

from .tda_layout import calculate_widths, index_label, place_tokens, render_line
from .tokenizer import token_width, tokenize_with_positions

MISSING_VALUE = '****'
TDA_SIGNATURE = '2DA'
TDA_VERSION_LINE = '2DA V2.0'

LogSink = Callable[[str], None]

_LINE_BREAK = re.compile(r'\r\n|\r|\n')


class TDAFormatError(ValueError):
    """Raised when a file is not a 2DA table"""
    pass


@dataclass
class TDARow:
    """
    One data row.

    The index is kept verbatim; it does not have to be numeric or unique.
    token_starts/visual_length remember where this row's tokens sat on disk.
    """
    index: str = ''
    values: List[str] = field(default_factory=list)
    token_starts: List[int] = field(default_factory=list)
    visual_length: int = 0

    def get(self, column: int) -> Optional[str]:
        """Value of a column, None when missing or ****"""
        if column < 0 or column >= len(self.values):
            return None
        value = self.values[column]
        return None if value == MISSING_VALUE else value


@dataclass
class TDADocument:
    """A parsed 2DA table plus the layout needed to write it back"""
    columns: List[str] = field(default_factory=list)
    rows: List[TDARow] = field(default_factory=list)
    header_indent: int = 1
    index_width: int = 0
    column_widths: List[int] = field(default_factory=list)
    header_token_starts: List[int] = field(default_factory=list)
    header_visual_length: int = 0

    @property
    def row_count(self) -> int:
        return len(self.rows)

    def column_position(self, name: str) -> int:
        """Position of the first column with this name (case-insensitive), -1 if absent"""
        lowered = name.lower()
        for position, column in enumerate(self.columns):
            if column.lower() == lowered:
                return position
        return -1

    def get_value(self, row: int, column: Union[int, str]) -> Optional[str]:
        if row < 0 or row >= len(self.rows):
            return None
        if isinstance(column, str):
            column = self.column_position(column)
        return self.rows[row].get(column)

    def set_value(self, row: int, column: int, value: Optional[str]):
        """Set a cell; blank values become ****"""
        target = self.rows[row]
        while len(target.values) < len(self.columns):
            target.values.append(MISSING_VALUE)
        target.values[column] = value if value and value.strip() else MISSING_VALUE

    def add_column(self, name: str, default: str = MISSING_VALUE) -> int:
        """Append a column, filling every row with default. Returns its position."""
        if self.header_token_starts and len(self.header_token_starts) == len(self.columns):
            last = len(self.columns) - 1
            last_start = self.header_token_starts[last]
            last_width = self.column_widths[last] if last < len(self.column_widths) else 0
            new_start = max(last_start + last_width, last_start + len(self.columns[last]) + 1)
            self.header_token_starts.append(new_start)
            self.header_visual_length = max(self.header_visual_length, new_start + len(name))
        else:
            self.header_token_starts.clear()

        self.columns.append(name)
        self.column_widths.append(len(name))
        for row in self.rows:
            while len(row.values) < len(self.columns) - 1:
                row.values.append(MISSING_VALUE)
            row.values.append(default)
        return len(self.columns) - 1

    def remove_column(self, position: int):
        """Remove a column by position (duplicate names are allowed)"""
        if position < 0 or position >= len(self.columns):
            raise IndexError(f"Column position {position} out of range")

        had_header_layout = len(self.header_token_starts) == len(self.columns)
        del self.columns[position]
        if position < len(self.column_widths):
            del self.column_widths[position]
        if had_header_layout:
            del self.header_token_starts[position]
        else:
            self.header_token_starts.clear()
        for row in self.rows:
            if position < len(row.values):
                del row.values[position]
            # Remembered row starts include the index token at slot 0
            if position + 1 < len(row.token_starts):
                del row.token_starts[position + 1]

    def insert_row(self, position: int, index: Optional[str] = None,
                   values: Optional[List[str]] = None) -> TDARow:
        """Insert a row; missing values are filled with ****"""
        position = max(0, min(position, len(self.rows)))
        row_values = list(values or [])[:len(self.columns)]
        row_values.extend([MISSING_VALUE] * (len(self.columns) - len(row_values)))
        row = TDARow(index=index if index is not None else str(position), values=row_values)
        self.rows.insert(position, row)
        return row

    def delete_row(self, position: int) -> TDARow:
        return self.rows.pop(position)


def looks_like_2da(text: str) -> bool:
    """Whether the first non-blank line carries the 2DA signature"""
    for line in _LINE_BREAK.split(text):
        if not line.strip():
            continue
        return line.lstrip().upper().startswith(TDA_SIGNATURE)
    return False


class TDAParser:
    """
    Parser/writer for 2DA text.

    Args:
        log: receives warnings about repaired input; defaults to the module logger
        strict_header: raise TDAFormatError when the 2DA signature is missing
    """

    def __init__(self, log: Optional[LogSink] = None, strict_header: bool = False):
        self.log = log
        self.strict_header = strict_header

    def _warn(self, message: str):
        if self.log is not None:
            self.log(message)
        else:
            logger.warning(message)

    def parse_file(self, file_path: Union[str, Path]) -> TDADocument:
        """Read a 2DA file (UTF-8, BOM tolerated) and parse it"""
        path = Path(file_path)
        if not path.exists():
            raise FileNotFoundError(f"2DA file not found: {path}")

        text = path.read_text(encoding='utf-8-sig')
        document = self.parse(text)
        logger.debug(f"Parsed 2DA {path.name}: {len(document.columns)} columns, {len(document.rows)} rows")
        return document

    def parse(self, text: str) -> TDADocument:
        document = TDADocument()
        lines = iter(line for line in _LINE_BREAK.split(text) if line.strip())

        signature = next(lines, None)
        if signature is None or not signature.lstrip().upper().startswith(TDA_SIGNATURE):
            if self.strict_header:
                raise TDAFormatError("Missing 2DA header.")
            self._warn("Missing 2DA header. File may not be a valid 2DA.")

        columns_line = next(lines, None)
        if columns_line is None:
            self._warn("No column header line found.")
            return document

        header = tokenize_with_positions(columns_line)
        document.columns = header.texts
        if not document.columns:
            self._warn("Column header line is empty.")
            return document

        document.header_indent = header.tokens[0].start if header.tokens else 1
        document.header_visual_length = header.visual_length
        document.header_token_starts = [token.start for token in header.tokens]
        document.column_widths = [token_width(header.tokens, i) for i in range(len(document.columns))]

        for raw_line in lines:
            self._parse_row(document, raw_line)

        return document

    def _parse_row(self, document: TDADocument, raw_line: str):
        line = tokenize_with_positions(raw_line)
        if not line.tokens:
            return

        column_count = len(document.columns)
        texts = line.texts
        row = TDARow(index=texts[0])
        values = texts[1:]

        if len(values) < column_count:
            missing = column_count - len(values)
            self._warn(f"Row {row.index} is missing {missing} value(s); padded with {MISSING_VALUE}.")
            values.extend([MISSING_VALUE] * missing)
        elif len(values) > column_count:
            self._warn(f"Row {row.index} has extra tokens; extra values will be concatenated.")
            combined = ' '.join(values[column_count - 1:])
            values = values[:column_count - 1] + [combined]

        row.values = values
        row.token_starts = [token.start for token in line.tokens]
        row.visual_length = line.visual_length
        document.rows.append(row)

        index_width = token_width(line.tokens, 0)
        if column_count:
            index_width = max(index_width, len(row.index) + 1)
        document.index_width = max(document.index_width, index_width)
        while len(document.column_widths) < column_count:
            document.column_widths.append(0)
        for i in range(column_count):
            if i + 1 < len(line.tokens):
                document.column_widths[i] = max(document.column_widths[i], token_width(line.tokens, i + 1))

    def serialize(self, document: TDADocument) -> str:
        """
        Write a document back to 2DA V2.0 text.

        Pure: the document is left untouched and the same document always
        produces the same text.
        """
        layout = calculate_widths(document)
        columns = document.columns

        header_starts = place_tokens(columns, document.header_token_starts,
                                     layout.header_indent, layout.column_widths)
        lines = [
            TDA_VERSION_LINE,
            '',
            render_line(columns, header_starts, document.header_visual_length),
        ]

        row_widths = layout.row_widths
        for position, row in enumerate(document.rows):
            tokens = [index_label(row, position)]
            for column in range(len(columns)):
                tokens.append(row.values[column] if column < len(row.values) else MISSING_VALUE)

            if layout.use_header_layout:
                desired = [0] + document.header_token_starts
            elif row.token_starts:
                desired = row.token_starts
            else:
                desired = [0] + header_starts

            starts = place_tokens(tokens, desired, 0, row_widths)
            lines.append(render_line(tokens, starts, row.visual_length))

        return '\n'.join(lines) + '\n'

    def refresh_widths(self, document: TDADocument):
        """
        Store the effective widths back into the document.

        Called after edits so columns only ever widen between saves: a value
        that grew and shrank again keeps the wider column.
        """
        layout = calculate_widths(document)
        document.index_width = layout.index_width
        document.column_widths = list(layout.column_widths)

        if not layout.use_header_layout:
            return

        old_starts = document.header_token_starts
        new_starts = place_tokens(document.columns, old_starts, layout.header_indent, layout.column_widths)
        # The last column keeps its trailing padding by shifting with its start
        last = len(new_starts) - 1
        document.header_visual_length += new_starts[last] - old_starts[last]
        document.header_token_starts = new_starts


def parse_2da(text: str, log: Optional[LogSink] = None, strict_header: bool = False) -> TDADocument:
    return TDAParser(log=log, strict_header=strict_header).parse(text)


def serialize_2da(document: TDADocument) -> str:
    return TDAParser().serialize(document)
