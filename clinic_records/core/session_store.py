from typing import MutableMapping, Optional

import streamlit as st

from .storage import KeyValueStore

SESSION_KEY_PREFIX = "clinic_kv:"


class SessionStateKeyValueStore(KeyValueStore):
    """Browser-session storage for the Streamlit front end.

    Values live in st.session_state under a "clinic_kv:" prefix so they don't
    collide with widget keys. Any mutable mapping can be injected instead
    (tests, or hosts without a Streamlit script context).
    """

    backend_name = "session"

    def __init__(self, state: Optional[MutableMapping] = None):
        self._state = state if state is not None else st.session_state

    def _slot(self, key: str) -> str:
        return SESSION_KEY_PREFIX + key

    def _raw_get(self, key):
        return self._state.get(self._slot(key))

    def _raw_set_many(self, items):
        for key, raw in items.items():
            self._state[self._slot(key)] = raw

    def _raw_remove_many(self, keys):
        for key in keys:
            slot = self._slot(key)
            if slot in self._state:
                del self._state[slot]

    def _raw_keys(self):
        return [
            str(slot)[len(SESSION_KEY_PREFIX):]
            for slot in list(self._state.keys())
            if str(slot).startswith(SESSION_KEY_PREFIX)
        ]
