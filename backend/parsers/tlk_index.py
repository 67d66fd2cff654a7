"""
TLK string id spaces

Raw ids are what the JSON/binary table stores, counting from 0. Module ids
add TLK_USER_INDEX_BASE, the start of the custom (module) string range, so
entries loaded from a custom table never collide with base game ids.
"""

TLK_USER_INDEX_BASE = 16777216


def to_module_id(raw_id: int) -> int:
    return raw_id + TLK_USER_INDEX_BASE


def to_raw_id(module_id: int) -> int:
    """Ids below the module range are already raw and pass through unchanged"""
    if module_id >= TLK_USER_INDEX_BASE:
        return module_id - TLK_USER_INDEX_BASE
    return module_id


def is_module_id(index: int) -> bool:
    return index >= TLK_USER_INDEX_BASE
