"""In-process profile cache keyed by user id.

No TTL: entries live until explicitly rebuilt, invalidated or the process
exits. Concurrent builds for the same user may both run; the last write wins.
"""

import logging
import threading
from collections.abc import Awaitable, Callable

from moodtrip.services.personalization.profile import TravelerProfile

logger = logging.getLogger(__name__)


class ProfileCache:
    """Lock-guarded user id → TravelerProfile map."""

    def __init__(self):
        self._profiles: dict[str, TravelerProfile] = {}
        self._lock = threading.Lock()

    def get(self, user_id: str) -> TravelerProfile | None:
        with self._lock:
            return self._profiles.get(user_id)

    def put(self, user_id: str, profile: TravelerProfile) -> None:
        with self._lock:
            self._profiles[user_id] = profile

    async def get_or_build(
        self,
        user_id: str,
        build: Callable[[str], Awaitable[TravelerProfile]],
    ) -> TravelerProfile:
        """Return the cached profile, or build and cache one on a miss."""
        cached = self.get(user_id)
        if cached is not None:
            return cached
        logger.debug(f"Profile cache miss for user {user_id}")
        profile = await build(user_id)
        self.put(user_id, profile)
        return profile

    def update(
        self,
        user_id: str,
        fn: Callable[[TravelerProfile], TravelerProfile],
    ) -> TravelerProfile | None:
        """Replace the cached profile with fn(profile). Returns the new profile,
        or None when the user has no cached profile."""
        with self._lock:
            current = self._profiles.get(user_id)
            if current is None:
                return None
            updated = fn(current)
            self._profiles[user_id] = updated
            return updated

    def invalidate(self, user_id: str) -> bool:
        with self._lock:
            return self._profiles.pop(user_id, None) is not None

    def clear(self) -> None:
        with self._lock:
            self._profiles.clear()

    def __len__(self) -> int:
        with self._lock:
            return len(self._profiles)

    def __contains__(self, user_id: str) -> bool:
        with self._lock:
            return user_id in self._profiles
