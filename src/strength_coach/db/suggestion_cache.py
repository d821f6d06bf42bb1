"""SQLite-backed cache of pre-workout suggestions.

Entries are keyed by workout template plus a fingerprint of the user
profile, and validated against a cheap hash of the session history. An
entry is absent once it is older than the TTL (24 hours by default) or when
the history hash no longer matches. Storage problems never propagate from
the convenience methods: they are logged and treated as a miss.
"""

import hashlib
import json
import logging
import sqlite3
from contextlib import contextmanager
from dataclasses import dataclass
from datetime import datetime, timedelta
from pathlib import Path
from typing import Any, Dict, List, Optional, Sequence, Union

from pydantic import ValidationError as PydanticValidationError

from ..exceptions import CacheError
from ..models.profile import UserProfile
from ..models.sessions import WorkoutSession, utc_now
from ..models.suggestions import ExerciseSuggestion

logger = logging.getLogger(__name__)

SESSIONS_HASH_LIMIT = 10
PROFILE_FINGERPRINT_LENGTH = 16


def compute_sessions_hash(sessions: Sequence[WorkoutSession]) -> str:
    """
    Hash of the 10 most recently started sessions, newest first.

    Elements are ``id:exercise_count:done`` or ``id:exercise_count:open``
    joined by ``|``. The caller's list order does not matter.
    """
    newest = sorted(sessions, key=lambda s: (s.started_at_utc, s.id), reverse=True)
    return "|".join(
        f"{s.id}:{len(s.exercises)}:{'done' if s.is_completed else 'open'}"
        for s in newest[:SESSIONS_HASH_LIMIT]
    )


def compute_profile_fingerprint(profile: Optional[UserProfile]) -> str:
    """Short digest of every profile field that shapes a suggestion."""
    data = (profile or UserProfile()).model_dump(mode="json")
    encoded = json.dumps(data, sort_keys=True).encode("utf-8")
    return hashlib.sha256(encoded).hexdigest()[:PROFILE_FINGERPRINT_LENGTH]


@dataclass
class SuggestionCacheEntry:
    """A cached suggestion payload."""
    cache_key: str
    sessions_hash: str
    payload: Any
    created_at: datetime

    def to_dict(self) -> Dict[str, Any]:
        return {
            "cache_key": self.cache_key,
            "sessions_hash": self.sessions_hash,
            "payload": self.payload,
            "created_at": self.created_at.isoformat(),
        }


class SuggestionCacheRepository:
    """
    SQLite repository for generated suggestions.

    ``get``/``save`` raise CacheError on storage or decode failures.
    ``get_suggestions``/``save_suggestions`` swallow those into a miss.
    """

    # Default TTL for cache entries (24 hours)
    DEFAULT_TTL_SECONDS = 86400

    def __init__(
        self,
        db_path: Union[str, Path],
        ttl_seconds: int = DEFAULT_TTL_SECONDS,
    ):
        """
        Initialize the suggestion cache repository.

        Args:
            db_path: Path to the SQLite database file
            ttl_seconds: Age after which entries are ignored
        """
        self.db_path = Path(db_path)
        self.ttl = timedelta(seconds=ttl_seconds)
        self._ensure_table_exists()

    @contextmanager
    def _get_connection(self):
        """Get database connection with context manager."""
        conn = sqlite3.connect(str(self.db_path))
        conn.row_factory = sqlite3.Row
        try:
            yield conn
            conn.commit()
        except Exception:
            conn.rollback()
            raise
        finally:
            conn.close()

    def _ensure_table_exists(self) -> None:
        try:
            with self._get_connection() as conn:
                conn.execute("""
                    CREATE TABLE IF NOT EXISTS suggestion_cache (
                        cache_key TEXT PRIMARY KEY,
                        sessions_hash TEXT NOT NULL,
                        payload_json TEXT NOT NULL,
                        created_at TEXT NOT NULL
                    )
                """)
        except sqlite3.Error as e:
            logger.warning(f"Could not initialize suggestion cache at {self.db_path}: {e}")

    @staticmethod
    def key_for_template(template_id: str, profile: Optional[UserProfile] = None) -> str:
        return f"suggestions:{template_id}:{compute_profile_fingerprint(profile)}"

    def get(
        self,
        cache_key: str,
        sessions_hash: str,
        now: Optional[datetime] = None,
    ) -> Optional[SuggestionCacheEntry]:
        """
        Fetch a live entry.

        Returns:
            The entry, or None when missing, expired or hash-mismatched

        Raises:
            CacheError: On sqlite or decode failures
        """
        now = now or utc_now()
        try:
            with self._get_connection() as conn:
                row = conn.execute(
                    "SELECT * FROM suggestion_cache WHERE cache_key = ?",
                    (cache_key,),
                ).fetchone()
        except sqlite3.Error as e:
            raise CacheError(f"Failed to read suggestion cache: {e}", details={"cache_key": cache_key})

        if row is None:
            return None

        try:
            created_at = datetime.fromisoformat(row["created_at"])
            payload = json.loads(row["payload_json"])
        except (ValueError, TypeError) as e:
            raise CacheError(f"Corrupt suggestion cache entry: {e}", details={"cache_key": cache_key})

        if now - created_at > self.ttl:
            return None
        if row["sessions_hash"] != sessions_hash:
            return None

        return SuggestionCacheEntry(
            cache_key=row["cache_key"],
            sessions_hash=row["sessions_hash"],
            payload=payload,
            created_at=created_at,
        )

    def save(
        self,
        cache_key: str,
        sessions_hash: str,
        payload: Any,
        now: Optional[datetime] = None,
    ) -> SuggestionCacheEntry:
        """
        Store or replace an entry.

        Raises:
            CacheError: On sqlite or encode failures
        """
        created_at = now or utc_now()
        try:
            payload_json = json.dumps(payload)
            with self._get_connection() as conn:
                conn.execute(
                    """
                    INSERT OR REPLACE INTO suggestion_cache
                    (cache_key, sessions_hash, payload_json, created_at)
                    VALUES (?, ?, ?, ?)
                    """,
                    (cache_key, sessions_hash, payload_json, created_at.isoformat()),
                )
        except (sqlite3.Error, TypeError, ValueError) as e:
            raise CacheError(f"Failed to write suggestion cache: {e}", details={"cache_key": cache_key})

        return SuggestionCacheEntry(
            cache_key=cache_key,
            sessions_hash=sessions_hash,
            payload=payload,
            created_at=created_at,
        )

    def delete(self, cache_key: str) -> bool:
        with self._get_connection() as conn:
            cursor = conn.execute(
                "DELETE FROM suggestion_cache WHERE cache_key = ?", (cache_key,)
            )
            return cursor.rowcount > 0

    def clear(self) -> int:
        """Delete every entry. Returns the number removed."""
        with self._get_connection() as conn:
            cursor = conn.execute("DELETE FROM suggestion_cache")
            return cursor.rowcount

    def delete_template(self, template_id: str) -> int:
        """Delete the entries of a template for every profile. Returns the number removed."""
        prefix = f"suggestions:{template_id}:"
        with self._get_connection() as conn:
            cursor = conn.execute(
                "DELETE FROM suggestion_cache WHERE substr(cache_key, 1, ?) = ? AND length(cache_key) = ?",
                (len(prefix), prefix, len(prefix) + PROFILE_FINGERPRINT_LENGTH),
            )
            return cursor.rowcount

    def cleanup_expired(self, now: Optional[datetime] = None) -> int:
        """Delete entries past the TTL. Returns the number removed."""
        cutoff = (now or utc_now()) - self.ttl
        with self._get_connection() as conn:
            cursor = conn.execute(
                "DELETE FROM suggestion_cache WHERE created_at < ?",
                (cutoff.isoformat(),),
            )
            return cursor.rowcount

    # ------------------------------------------------------------------
    # Suggestion convenience API (errors become misses)
    # ------------------------------------------------------------------

    def get_suggestions(
        self,
        template_id: str,
        sessions: Sequence[WorkoutSession],
        now: Optional[datetime] = None,
        profile: Optional[UserProfile] = None,
    ) -> Optional[List[ExerciseSuggestion]]:
        """Cached suggestions for a template and profile, or None."""
        cache_key = self.key_for_template(template_id, profile)
        try:
            entry = self.get(cache_key, compute_sessions_hash(sessions), now)
            if entry is None:
                return None
            return [ExerciseSuggestion.model_validate(item) for item in entry.payload]
        except (CacheError, PydanticValidationError, TypeError) as e:
            logger.warning(f"Ignoring unusable suggestion cache entry {cache_key}: {e}")
            return None

    def save_suggestions(
        self,
        template_id: str,
        sessions: Sequence[WorkoutSession],
        suggestions: List[ExerciseSuggestion],
        now: Optional[datetime] = None,
        profile: Optional[UserProfile] = None,
    ) -> None:
        payload = [s.model_dump(mode="json", by_alias=True) for s in suggestions]
        cache_key = self.key_for_template(template_id, profile)
        try:
            self.save(cache_key, compute_sessions_hash(sessions), payload, now)
        except CacheError as e:
            logger.warning(f"Could not cache suggestions for template {template_id}: {e}")
