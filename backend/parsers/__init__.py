"""
NWN 2DA and TLK text parsers
"""

from .tokenizer import Token, TokenizedLine, tokenize, tokenize_with_positions, TAB_WIDTH
from .tda_layout import ColumnLayout, calculate_widths
from .tda import (
    TDAParser, TDADocument, TDARow, TDAFormatError,
    MISSING_VALUE, looks_like_2da, parse_2da, serialize_2da
)
from .tlk_index import TLK_USER_INDEX_BASE, to_module_id, to_raw_id, is_module_id
from .tlk_text import (
    TLKEntry, TLK_FALLBACK_BASE_INDEX, parse_tlk_line, parse_tlk_text,
    serialize_tlk_text, convert_user_to_base_indices, dedupe_entries
)
from .tlk_json import (
    TLKJsonEntry, TLKJsonDocument, TLKJsonImport, TLKJsonError,
    parse_tlk_json, build_tlk_json
)

__all__ = [
    # Tokenizer
    'Token', 'TokenizedLine', 'tokenize', 'tokenize_with_positions', 'TAB_WIDTH',

    # 2DA
    'ColumnLayout', 'calculate_widths',
    'TDAParser', 'TDADocument', 'TDARow', 'TDAFormatError',
    'MISSING_VALUE', 'looks_like_2da', 'parse_2da', 'serialize_2da',

    # TLK ids
    'TLK_USER_INDEX_BASE', 'to_module_id', 'to_raw_id', 'is_module_id',

    # TLK text
    'TLKEntry', 'TLK_FALLBACK_BASE_INDEX', 'parse_tlk_line', 'parse_tlk_text',
    'serialize_tlk_text', 'convert_user_to_base_indices', 'dedupe_entries',

    # TLK JSON
    'TLKJsonEntry', 'TLKJsonDocument', 'TLKJsonImport', 'TLKJsonError',
    'parse_tlk_json', 'build_tlk_json',
]
