"""
Column layout for 2DA serialization

Works out how wide every column has to be and where each token of a line
goes, given the positions remembered when the file was parsed.
"""

from dataclasses import dataclass
from typing import TYPE_CHECKING, List, Sequence

if TYPE_CHECKING:
    from .tda import TDADocument


@dataclass
class ColumnLayout:
    """Effective widths used for one serialization pass"""
    index_width: int
    column_widths: List[int]
    header_indent: int
    use_header_layout: bool

    @property
    def row_widths(self) -> List[int]:
        # Row lines lead with the index token, then one token per column
        return [self.index_width] + self.column_widths


def index_label(row, position: int) -> str:
    """Index written for a row; blank indexes are replaced by the row position"""
    return row.index if row.index and row.index.strip() else str(position)


def has_header_layout(document: 'TDADocument') -> bool:
    """True when the remembered header starts line up with the columns"""
    column_count = len(document.columns)
    return column_count > 0 and len(document.header_token_starts) == column_count


def _longest_value(document: 'TDADocument', column: int) -> int:
    longest = len(document.columns[column] or '')
    for row in document.rows:
        if column < len(row.values):
            longest = max(longest, len(row.values[column] or ''))
    return longest


def calculate_widths(document: 'TDADocument') -> ColumnLayout:
    """
    Compute the effective column widths of a document.

    A column is never narrower than its stored width, its name or its
    longest current value. When the header layout is usable the header token
    starts define the column boundaries instead of the stored widths, so rows
    snap under the header.
    """
    column_count = len(document.columns)
    use_header_layout = has_header_layout(document)

    longest_index = max((len(index_label(row, position)) for position, row in enumerate(document.rows)), default=0)
    index_width = max(document.index_width, longest_index)
    if column_count:
        # Every row has a value after its index, so keep one blank column after the longest index
        index_width = max(index_width, longest_index + 1)
    header_indent = max(0, document.header_indent)

    widths: List[int] = []
    if use_header_layout:
        starts = document.header_token_starts
        for i in range(column_count):
            next_start = starts[i + 1] if i + 1 < column_count else document.header_visual_length
            header_width = max(0, next_start - starts[i])
            widths.append(max(header_width, _longest_value(document, i)))
        # Index spacing read from the rows is kept even when it pushes values past their header
        index_width = max(index_width, header_indent)
    else:
        for i in range(column_count):
            stored = document.column_widths[i] if i < len(document.column_widths) else 0
            widths.append(max(stored, _longest_value(document, i)))
        # Without remembered header positions the header must clear the index column
        header_indent = max(header_indent, index_width) if document.rows else header_indent

    return ColumnLayout(
        index_width=index_width,
        column_widths=widths,
        header_indent=header_indent,
        use_header_layout=use_header_layout,
    )


def place_tokens(
    tokens: Sequence[str],
    desired_starts: Sequence[int],
    indent: int,
    widths: Sequence[int],
) -> List[int]:
    """
    Choose the start column of every token on a line.

    Each token goes to its desired start unless the previous token (its
    text, its column width and one separating blank) reaches past it.
    Tokens without a desired start are packed at the minimum position.
    """
    starts: List[int] = []
    min_start = indent
    last = len(tokens) - 1

    for i, token in enumerate(tokens):
        token = token or ''
        desired = desired_starts[i] if i < len(desired_starts) else min_start
        start = max(desired, min_start)
        starts.append(start)

        min_start = start + len(token)
        if i < len(widths):
            min_start = max(min_start, start + widths[i])
        if i < last:
            min_start = max(min_start, start + len(token) + 1)

    return starts


def render_line(tokens: Sequence[str], starts: Sequence[int], visual_length: int = 0) -> str:
    """Lay tokens out at their start columns, padding to visual_length"""
    parts: List[str] = []
    length = 0
    for token, start in zip(tokens, starts):
        token = token or ''
        if length < start:
            parts.append(' ' * (start - length))
            length = start
        parts.append(token)
        length += len(token)

    if length < visual_length:
        parts.append(' ' * (visual_length - length))

    return ''.join(parts)

