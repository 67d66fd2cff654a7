"""
Services module for the Aribeth editor
Editing sessions with undo/redo and the nwn_tlk converter adapter
"""

from .edit_history import EditHistory
from .tda_session import TDAEditSession
from .tlk_session import TLKEditSession
from .tlk_tool import NwnTlkTool, TLKToolError, TLKToolNotFoundError

__all__ = [
    'EditHistory', 'TDAEditSession', 'TLKEditSession',
    'NwnTlkTool', 'TLKToolError', 'TLKToolNotFoundError',
]
