"""Game session state and persistence."""

from .session import GameSession, GameState, History, HistorySnapshot, format_time
from .persistence import (
    SCHEMA_VERSION,
    SnapshotError,
    session_to_dict,
    session_from_dict,
    save_session,
    load_session,
)

__all__ = [
    "GameSession",
    "GameState",
    "History",
    "HistorySnapshot",
    "format_time",
    "SCHEMA_VERSION",
    "SnapshotError",
    "session_to_dict",
    "session_from_dict",
    "save_session",
    "load_session",
]
