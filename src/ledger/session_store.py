"""
Session Store - owns the active session and the durable user table.

Both records describe the same identity; every mutation goes through
upsert_identity(), which re-reads the latest user-table row, merges the
change and writes the row and the redacted session back in one synchronous
step. Nothing between the read and the write yields.
"""

import uuid
from datetime import date
from typing import Any, Callable, Dict, List, Optional, Union

from loguru import logger
from pydantic import ValidationError

from src.core.exceptions import (
    CorruptPersistedRecordError,
    DuplicateEmailError,
    InvalidCredentialsError,
    NotAuthenticatedError,
    StaleSessionError,
)
from src.ledger.models import Identity, IdentityProfile, ProfileUpdate
from src.ledger.security import PasswordHasher, validate_password
from src.services.stats.schemas import TradingStats
from src.storage.persisted_store import PersistedStore, decode_record
from src.storage.store_keys import StoreKeys
from src.utils.dates import Clock, calendar_day

IdentityUpdate = Union[Dict[str, Any], Callable[[Identity], Dict[str, Any]]]

# Fields that identify the row; never changed by a merge
_KEY_FIELDS = frozenset({"id", "email", "password_hash"})


class SessionStore:
    """
    Current identity + user table

    Usage:
        >>> sessions = SessionStore(MemoryStore())
        >>> sessions.register("a@b.c", "Ann", "secret", phone="+1 555")
        >>> sessions.upgrade_to_vip()
        >>> sessions.logout()
    """

    def __init__(
        self,
        store: PersistedStore,
        keys: Optional[StoreKeys] = None,
        hasher: Optional[PasswordHasher] = None,
        clock: Clock = date.today,
    ):
        self._store = store
        self._keys = keys or StoreKeys()
        self._hasher = hasher or PasswordHasher()
        self._clock = clock
        self._current: Optional[IdentityProfile] = None

    # --- 1. STATE ---

    @property
    def current(self) -> Optional[IdentityProfile]:
        """Active identity (redacted), or None for a guest."""
        return self._current

    @property
    def is_authenticated(self) -> bool:
        return self._current is not None

    def today(self) -> str:
        return calendar_day(self._clock)

    def _reset_fields(self) -> Dict[str, Any]:
        return {"free_credits_used": 0, "last_reset_date": self.today()}

    # --- 2. USER TABLE ---

    def load_users(self) -> List[Identity]:
        """Read the user table; corrupt rows are skipped."""
        raw = self._store.get_json(self._keys.user_table, default=[])
        if not isinstance(raw, list):
            logger.warning("User table is not a list. Treating it as empty.")
            return []

        users: List[Identity] = []
        for row in raw:
            try:
                users.append(Identity.model_validate(row))
            except ValidationError as e:
                logger.warning(f"Skipping corrupt user-table row ({e.error_count()} errors)")
        return users

    def _save_users(self, users: List[Identity]) -> None:
        self._store.set_json(self._keys.user_table, [u.model_dump(mode="json") for u in users])

    @staticmethod
    def _find_index(users: List[Identity], email: str) -> Optional[int]:
        for index, user in enumerate(users):
            if user.email == email:
                return index
        return None

    def get_by_email(self, email: str) -> Optional[Identity]:
        """Retrieves a user-table row by its unique email."""
        users = self.load_users()
        index = self._find_index(users, email)
        return users[index] if index is not None else None

    # --- 3. ACTIVE SESSION RECORD ---

    def _load_session_record(self) -> Optional[IdentityProfile]:
        raw = self._store.get(self._keys.active_session)
        if raw is None:
            return None

        try:
            return IdentityProfile.model_validate(decode_record(self._keys.active_session, raw))
        except CorruptPersistedRecordError as e:
            logger.warning(f"{e}. Treating as logged out.")
        except ValidationError as e:
            logger.warning(f"Corrupt active session record ({e.error_count()} errors). Treating as logged out.")

        self._store.delete(self._keys.active_session)
        return None

    def _write_session(self, profile: IdentityProfile) -> None:
        self._store.set_json(self._keys.active_session, profile.model_dump(mode="json"))
        self._current = profile

    def _clear_session(self) -> None:
        self._store.delete(self._keys.active_session)
        self._current = None

    def _expire_stale_session(self, email: str) -> None:
        logger.warning(f"Active session for {email} has no user-table row. Forcing logout.")
        self._clear_session()

    # --- 4. REGISTRATION / AUTHENTICATION ---

    def register(
        self,
        email: str,
        name: str,
        password: str,
        phone: Optional[str] = None,
    ) -> IdentityProfile:
        """
        Register a new identity and make it the active session

        Raises:
            DuplicateEmailError: If the email is already in the user table
            InvalidPasswordError: If the password is empty or over 72 bytes
        """
        validate_password(password)

        users = self.load_users()
        if self._find_index(users, email) is not None:
            logger.info(f"Registration rejected, email already exists: {email}")
            raise DuplicateEmailError(email)

        identity = Identity(
            id=uuid.uuid4().hex,
            name=name,
            email=email,
            phone=phone,
            password_hash=self._hasher.hash_password(password),
            is_verified=False,
            is_vip=False,
            free_credits_used=0,
            last_reset_date=self.today(),
            stats=TradingStats(),
        )

        users.append(identity)
        self._save_users(users)
        self._write_session(identity.to_profile())

        logger.info(f"Registered identity {identity.id} ({email})")
        return self._current

    def login(self, email: str, password: str) -> IdentityProfile:
        """
        Authenticate by email + password and make the identity active

        The daily reset is applied to the stored row before it is exposed.

        Raises:
            InvalidCredentialsError: If no row matches
        """
        users = self.load_users()
        index = self._find_index(users, email)

        if index is None or not self._hasher.verify_password(password, users[index].password_hash):
            logger.info(f"Failed login for {email}")
            raise InvalidCredentialsError(email)

        identity = users[index]
        if identity.last_reset_date != self.today():
            identity = identity.model_copy(update=self._reset_fields())
            users[index] = identity
            self._save_users(users)
            logger.info(f"Daily quota reset for {email} on login")

        self._write_session(identity.to_profile())
        logger.info(f"Logged in identity {identity.id} ({email})")
        return self._current

    def logout(self) -> None:
        """Clear the active session. The user table is not touched."""
        if self._current is not None:
            logger.info(f"Logged out identity {self._current.id}")
        self._clear_session()

    def restore(self) -> Optional[IdentityProfile]:
        """
        Load the active session on process start

        Clears corrupt or stale sessions, applies the daily reset and makes
        the session record converge to its user-table row.
        """
        record = self._load_session_record()
        if record is None:
            self._current = None
            return None

        users = self.load_users()
        index = self._find_index(users, record.email)
        if index is None:
            self._expire_stale_session(record.email)
            return None

        identity = users[index]
        today = self.today()
        if record.last_reset_date != today or identity.last_reset_date != today:
            identity = identity.model_copy(update=self._reset_fields())
            users[index] = identity
            self._save_users(users)
            logger.info(f"Daily quota reset for {record.email} on restore")

        profile = identity.to_profile()
        if profile != record:
            self._write_session(profile)
        else:
            self._current = profile

        return self._current

    # --- 5. IDENTITY MUTATIONS ---

    def require_row(self) -> Identity:
        """
        Latest user-table row of the active identity

        Raises:
            NotAuthenticatedError: If no identity is active
            StaleSessionError: If the row no longer exists (session cleared)
        """
        if self._current is None:
            raise NotAuthenticatedError("No active session")

        row = self.get_by_email(self._current.email)
        if row is None:
            email = self._current.email
            self._expire_stale_session(email)
            raise StaleSessionError(email)
        return row

    def upsert_identity(self, update: IdentityUpdate) -> IdentityProfile:
        """
        Merge fields into the active identity's user-table row and session

        Args:
            update: Dict of fields, or a callable computing them from the
                latest persisted row (for read-modify-write like counters)

        Returns:
            The updated active session

        Raises:
            NotAuthenticatedError: If no identity is active
            StaleSessionError: If the row no longer exists (session cleared)
            ValueError: If the update touches id, email or password_hash
        """
        if self._current is None:
            raise NotAuthenticatedError("No active session")

        email = self._current.email
        users = self.load_users()
        index = self._find_index(users, email)
        if index is None:
            self._expire_stale_session(email)
            raise StaleSessionError(email)

        row = users[index]
        changes = update(row) if callable(update) else dict(update)

        forbidden = _KEY_FIELDS.intersection(changes)
        if forbidden:
            raise ValueError(f"Cannot change key fields: {sorted(forbidden)}")

        merged = Identity.model_validate({**row.model_dump(), **changes})
        users[index] = merged
        self._save_users(users)
        self._write_session(merged.to_profile())

        return self._current

    def ensure_daily_reset(self) -> bool:
        """
        Apply the daily reset lazily to the active identity

        Returns:
            True if a reset was persisted
        """
        if self._current is None or self._current.last_reset_date == self.today():
            return False

        self.upsert_identity(self._reset_fields())
        logger.info(f"Daily quota reset for {self._current.email}")
        return True

    def update_profile(self, data: Optional[ProfileUpdate] = None, **fields: Any) -> IdentityProfile:
        """
        Update editable profile fields (name, phone, avatar, bio)

        Accepts a ProfileUpdate or keyword fields.
        """
        if data is None:
            data = ProfileUpdate(**fields)

        changes = data.model_dump(exclude_unset=True)
        if not changes:
            if self._current is None:
                raise NotAuthenticatedError("No active session")
            return self._current

        profile = self.upsert_identity(changes)
        logger.info(f"Profile updated for {profile.id}: {sorted(changes)}")
        return profile

    def verify(self) -> IdentityProfile:
        """Mark the active identity as verified."""
        profile = self.upsert_identity({"is_verified": True})
        logger.info(f"Identity {profile.id} verified")
        return profile

    def upgrade_to_vip(self) -> IdentityProfile:
        """Mark the active identity as VIP."""
        profile = self.upsert_identity({"is_vip": True})
        logger.info(f"Identity {profile.id} upgraded to VIP")
        return profile

    # --- 6. DELETION ---

    def delete_identity(self, email: str) -> bool:
        """
        Remove a row from the user table together with its persisted history

        Clears the active session if it pointed at the removed row.

        Returns:
            True if a row was removed
        """
        users = self.load_users()
        index = self._find_index(users, email)

        removed = False
        if index is not None:
            identity = users.pop(index)
            self._save_users(users)
            self._store.delete(self._keys.history(identity.id))
            removed = True
            logger.info(f"Deleted identity {identity.id} ({email})")
        else:
            logger.warning(f"Delete requested for unknown email {email}")

        if self._current is not None and self._current.email == email:
            self._clear_session()

        return removed

    def delete_account(self) -> bool:
        """Delete the active identity's account."""
        if self._current is None:
            raise NotAuthenticatedError("No active session")
        return self.delete_identity(self._current.email)
