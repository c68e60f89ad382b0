# coding: utf-8
"""
Persisted key generation

Key format: {namespace}:{record}[:{owner}]

Examples:
    cnc:users
    cnc:active_session
    cnc:history:3f2a9c...
"""
from config.config import STORE_NAMESPACE, STORE_KEY_SEPARATOR


class StoreKeys:
    """Builder for the logical keys of every ledger record"""

    SEPARATOR = STORE_KEY_SEPARATOR

    ACTIVE_SESSION = "active_session"
    USER_TABLE = "users"
    HISTORY = "history"
    GUEST_COUNTER = "guest_tracker"
    PREFERENCES = "preferences"

    def __init__(self, namespace: str = STORE_NAMESPACE):
        self.namespace = namespace

    def build(self, *parts: str) -> str:
        """
        Build a key from components

        Examples:
            >>> StoreKeys("cnc").build("history", "42")
            'cnc:history:42'
        """
        return self.SEPARATOR.join([self.namespace, *parts])

    @property
    def active_session(self) -> str:
        return self.build(self.ACTIVE_SESSION)

    @property
    def user_table(self) -> str:
        return self.build(self.USER_TABLE)

    @property
    def guest_counter(self) -> str:
        return self.build(self.GUEST_COUNTER)

    @property
    def preferences(self) -> str:
        return self.build(self.PREFERENCES)

    def history(self, identity_id: str) -> str:
        return self.build(self.HISTORY, identity_id)
