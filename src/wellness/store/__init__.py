"""State ownership and persistence.

Key components:
- AppState container and factory defaults
- JSON serialization with tolerant loading of older records
- Atomic state file writes
- StateStore: the single mutation gateway with change notifications
"""

from __future__ import annotations

from wellness.store.serialization import deserialize_state, serialize_state
from wellness.store.state import STATE_VERSION, AppState, factory_defaults
from wellness.store.state_store import StateSnapshot, StateStore
from wellness.store.storage import StateFile

__all__ = [
    "STATE_VERSION",
    "AppState",
    "StateFile",
    "StateSnapshot",
    "StateStore",
    "deserialize_state",
    "factory_defaults",
    "serialize_state",
]
