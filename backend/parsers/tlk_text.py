"""
Plain-text TLK (talk table) reader and writer

Legacy string tables come in several hand-made text layouts. Each line is
sniffed against the known layouts in turn; a line that matches none still
becomes an entry, numbered after the previous one.

Supported line layouts:
    7|Cast a spell                      id|text, with "|" continuation lines
    7<TAB>VO_01<TAB>2.5<TAB>text        id, sound, duration, text
    7 | VO_01 | 2.5 | text              same, pipe separated
    7 | text                            id, text
    7 text                              id, whitespace, text
    # comment / // comment              ignored
"""

import re
from dataclasses import dataclass
from typing import Iterable, List, Optional

from .tlk_index import TLK_USER_INDEX_BASE, to_raw_id

# First index handed to lines without one, when no entry precedes them.
# Independent of TLK_USER_INDEX_BASE; both values are pinned by tests.
TLK_FALLBACK_BASE_INDEX = 1677216

CONTINUATION_PREFIX = '        |'

_INTEGER = re.compile(r'^[+-]?[0-9]+$')
_DIGITS = re.compile(r'^[0-9]+$')
_WHITESPACE_LINE = re.compile(r'^\s*([0-9]+)\s+(.*)$', re.DOTALL)
_LINE_BREAK = re.compile(r'\r\n|\n')


@dataclass
class TLKEntry:
    """A talk table string"""
    index: int
    text: str = ''
    sound_resref: str = ''
    duration: str = ''
    length: int = 0

    def recalculate_length(self):
        self.length = len(self.text or '')


def _parse_int(value: str) -> Optional[int]:
    value = value.strip()
    if not _INTEGER.match(value):
        return None
    return int(value)


def _strip_index_prefix(entry: TLKEntry) -> TLKEntry:
    """Drop an id that was written twice, e.g. "7|7|text" """
    if not entry.text:
        return entry

    prefix = str(entry.index)
    for separator in ('|', '\t', ' '):
        if entry.text.startswith(prefix + separator):
            entry.text = entry.text[len(prefix) + 1:].lstrip()
            break
    return entry


def _normalize_text(entry: TLKEntry) -> TLKEntry:
    """Remove stray leading pipes left over from the line layout"""
    if not entry.text:
        return entry

    text = entry.text.lstrip()
    while text.startswith('|'):
        text = text[1:].lstrip()
    entry.text = text
    return entry


def parse_tlk_line(line: str, fallback_index: int) -> TLKEntry:
    """
    Build an entry from a single line. Never fails: a line in no known
    layout becomes an entry with fallback_index and the whole line as text.
    """
    pipe_index = line.find('|')
    if pipe_index > 0 and _DIGITS.match(line[:pipe_index]):
        return _normalize_text(TLKEntry(
            index=int(line[:pipe_index]),
            text=line[pipe_index + 1:].lstrip(),
        ))

    tab_parts = line.split('\t')
    index = _parse_int(tab_parts[0]) if len(tab_parts) >= 4 else None
    if index is not None:
        entry = TLKEntry(
            index=index,
            sound_resref=tab_parts[1].strip(),
            duration=tab_parts[2].strip(),
            text='\t'.join(tab_parts[3:]).strip(),
        )
        return _normalize_text(_strip_index_prefix(entry))

    pipe_parts = [part.strip() for part in line.split('|')]
    index = _parse_int(pipe_parts[0]) if len(pipe_parts) >= 2 else None
    if index is not None:
        if len(pipe_parts) >= 4:
            entry = TLKEntry(
                index=index,
                sound_resref=pipe_parts[1],
                duration=pipe_parts[2],
                text=' | '.join(pipe_parts[3:]),
            )
        else:
            entry = TLKEntry(index=index, text=' | '.join(pipe_parts[1:]))
        return _normalize_text(_strip_index_prefix(entry))

    match = _WHITESPACE_LINE.match(line)
    if match:
        entry = TLKEntry(index=int(match.group(1)), text=match.group(2).strip())
        return _normalize_text(_strip_index_prefix(entry))

    return _normalize_text(_strip_index_prefix(TLKEntry(index=fallback_index, text=line.strip())))


def _is_comment(stripped: str) -> bool:
    return stripped.startswith('#') or stripped.startswith('//')


def parse_tlk_text(raw_text: str) -> List[TLKEntry]:
    """
    Parse a whole text table.

    Lines starting with "|" continue the previous entry's text on a new
    line. Blank and comment lines are skipped without consuming an index.
    """
    entries: List[TLKEntry] = []
    next_index = TLK_FALLBACK_BASE_INDEX
    current: Optional[TLKEntry] = None

    for line in _LINE_BREAK.split(raw_text):
        if not line.strip():
            continue

        stripped = line.lstrip()
        if _is_comment(stripped):
            continue

        if stripped.startswith('|'):
            if current is not None:
                continuation = stripped[1:].lstrip()
                separator = '\n' if current.text else ''
                current.text = f"{current.text}{separator}{continuation}"
                current.recalculate_length()
            continue

        entry = parse_tlk_line(line, next_index)
        entry.recalculate_length()
        entries.append(entry)
        current = entry
        next_index = entry.index + 1

    return entries


def dedupe_entries(entries: Iterable[TLKEntry]) -> List[TLKEntry]:
    """Keep the last entry for each index, ordered by index"""
    by_index = {}
    for entry in entries:
        if entry is not None:
            by_index[entry.index] = entry
    return [by_index[index] for index in sorted(by_index)]


def serialize_tlk_text(entries: Iterable[TLKEntry], use_base_indices: bool = False) -> str:
    """
    Write entries as "id|text" lines, extra text lines as "        |line".

    With use_base_indices, ids in the module range are written as raw ids.
    """
    lines: List[str] = []
    for entry in dedupe_entries(entries):
        entry.recalculate_length()
        index = to_raw_id(entry.index) if use_base_indices else entry.index

        text = (entry.text or '').replace('\r\n', '\n').replace('\r', '\n')
        text_lines = text.split('\n')
        lines.append(f"{index}|{text_lines[0]}")
        lines.extend(f"{CONTINUATION_PREFIX}{text_line}" for text_line in text_lines[1:])

    return ''.join(f"{line}\n" for line in lines)


def convert_user_to_base_indices(text: str) -> str:
    """Rewrite "id|" prefixes in the module range to raw ids, line by line"""
    lines = text.replace('\r\n', '\n').replace('\r', '\n').split('\n')
    for position, line in enumerate(lines):
        if not line.strip() or line.lstrip().startswith('|'):
            continue

        pipe_index = line.find('|')
        if pipe_index <= 0:
            continue

        index = _parse_int(line[:pipe_index])
        if index is not None and index >= TLK_USER_INDEX_BASE:
            lines[position] = f"{index - TLK_USER_INDEX_BASE}{line[pipe_index:]}"

    return '\n'.join(lines)
