"""
TLK JSON interchange

The external nwn_tlk converter turns a binary talk table into JSON of the form

    {"language": 0, "entries": [{"id": 0, "text": "...", "sound": "...", "soundLength": 1.5}, ...]}

Importing builds a dense entry list whose position equals the raw id, with
ids moved into the module range. Exporting writes the entries back on top of
the JSON the converter produced, so fields this editor does not know about
survive the round trip.
"""

import copy
import json
import math
from dataclasses import dataclass, field
from typing import Any, Dict, Iterable, List, Optional, Union

from loguru import logger
from pydantic import BaseModel, ConfigDict, Field, StrictInt, StrictStr, ValidationError

from .tlk_index import to_module_id, to_raw_id
from .tlk_text import TLKEntry, dedupe_entries


class TLKJsonError(ValueError):
    """Raised when converter output is not valid JSON"""
    pass


class TLKJsonEntry(BaseModel):
    """One entry object; unknown keys are allowed and left alone"""
    model_config = ConfigDict(extra='allow')

    id: Optional[StrictInt] = None
    text: Optional[StrictStr] = None
    sound: Optional[StrictStr] = None
    soundLength: Optional[Any] = None


class TLKJsonDocument(BaseModel):
    """Top-level envelope written when no converter output is available"""
    model_config = ConfigDict(extra='allow')

    language: int = 0
    entries: List[Dict[str, Any]] = Field(default_factory=list)


@dataclass
class TLKJsonImport:
    entries: List[TLKEntry] = field(default_factory=list)
    root: Optional[Dict[str, Any]] = None


def _placeholder(raw_id: int) -> TLKEntry:
    return TLKEntry(index=to_module_id(raw_id), text='', sound_resref='', duration='', length=0)


def _duration_text(value: Any) -> str:
    if value is None:
        return ''
    if isinstance(value, str):
        return value
    if isinstance(value, (dict, list)):
        return json.dumps(value)
    return str(value)


def _sound_length(duration: str) -> Optional[Union[int, float]]:
    """Numeric soundLength for a duration string, None when it is not a number"""
    if not duration or not duration.strip():
        return None
    try:
        value = float(duration)
    except ValueError:
        return None
    if not math.isfinite(value):
        return None
    return int(value) if value.is_integer() else value


def parse_tlk_json(raw_json: str) -> TLKJsonImport:
    """
    Load converter JSON into a dense list of entries.

    Position i of the result holds raw id i (as module id
    TLK_USER_INDEX_BASE + i). Ids missing from the JSON get empty
    placeholders. Items that are not usable entry objects are skipped but
    still count towards the length of the list.
    """
    if not raw_json or not raw_json.strip():
        return TLKJsonImport()

    try:
        root = json.loads(raw_json)
    except json.JSONDecodeError as e:
        raise TLKJsonError(f"Invalid TLK JSON: {e}") from e

    if not isinstance(root, dict):
        logger.warning("TLK JSON root is not an object; no entries loaded")
        return TLKJsonImport()

    nodes = root.get('entries')
    if not isinstance(nodes, list):
        return TLKJsonImport(root=root)

    entry_map: Dict[int, TLKEntry] = {}
    max_id = -1

    for position, node in enumerate(nodes):
        if not isinstance(node, dict):
            max_id = max(max_id, position)
            continue

        try:
            item = TLKJsonEntry.model_validate(node)
        except ValidationError as e:
            logger.warning(f"Skipping malformed TLK entry at position {position}: {e.error_count()} error(s)")
            max_id = max(max_id, position)
            continue

        raw_id = item.id if item.id is not None else position
        if raw_id < 0:
            logger.warning(f"Skipping TLK entry with negative id {raw_id}")
            continue

        entry = TLKEntry(
            index=to_module_id(raw_id),
            text=item.text or '',
            sound_resref=item.sound or '',
            duration=_duration_text(item.soundLength),
        )
        entry.recalculate_length()
        entry_map[raw_id] = entry
        max_id = max(max_id, raw_id)

    entries = [entry_map.get(raw_id) or _placeholder(raw_id) for raw_id in range(max_id + 1)]
    logger.debug(f"Loaded {len(entry_map)} TLK entries ({len(entries) - len(entry_map)} placeholders)")
    return TLKJsonImport(entries=entries, root=root)


def build_tlk_json(entries: Iterable[TLKEntry], root: Optional[Dict[str, Any]] = None) -> str:
    """
    Write entries as converter JSON.

    Entries are deduplicated (last wins) and sorted by id. Each object starts
    from the object with the same raw id in root, so extra keys are kept.
    root itself is not modified.
    """
    if isinstance(root, dict):
        document = copy.deepcopy(root)
    else:
        document = TLKJsonDocument().model_dump()

    existing: Dict[int, Dict[str, Any]] = {}
    nodes = document.get('entries')
    for node in nodes if isinstance(nodes, list) else []:
        if not isinstance(node, dict):
            continue
        node_id = node.get('id')
        if isinstance(node_id, int) and not isinstance(node_id, bool):
            existing[node_id] = node

    new_entries: List[Dict[str, Any]] = []
    for entry in dedupe_entries(entries):
        raw_id = to_raw_id(entry.index)
        obj = dict(existing.get(raw_id, {}))
        obj['id'] = raw_id
        obj['text'] = entry.text or ''

        if entry.sound_resref and entry.sound_resref.strip():
            obj['sound'] = entry.sound_resref
        else:
            obj.pop('sound', None)

        sound_length = _sound_length(entry.duration)
        if sound_length is not None:
            obj['soundLength'] = sound_length
        else:
            obj.pop('soundLength', None)

        new_entries.append(obj)

    document['entries'] = new_entries
    return json.dumps(document, indent=2, ensure_ascii=False)
