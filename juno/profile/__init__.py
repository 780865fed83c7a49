"""
Sender profile and its local persistence.

The profile is stored as JSON next to the other application data and expires
after a configurable number of days.
"""

import json
import time
from dataclasses import dataclass, asdict, fields
from pathlib import Path
from typing import Any, Dict, Optional

from ..utils import get_logger

logger = get_logger(__name__)

DEFAULT_TTL_SECONDS = 7 * 24 * 60 * 60

# camelCase names used in stored profile JSON
_WIRE_NAMES = {"resume_link": "resumeLink"}


@dataclass(frozen=True)
class Profile:
    """Sender details used to fill application emails. Every field is optional."""
    name: str = ""
    email: str = ""
    phone: str = ""
    portfolio: str = ""
    linkedin: str = ""
    figma: str = ""
    resume_link: str = ""
    bio: str = ""

    @classmethod
    def from_dict(cls, data: Optional[Dict[str, Any]]) -> "Profile":
        """Build a profile from snake_case or camelCase keys, ignoring unknown ones."""
        data = data or {}
        values = {}
        for f in fields(cls):
            value = data.get(f.name)
            if value is None and f.name in _WIRE_NAMES:
                value = data.get(_WIRE_NAMES[f.name])
            values[f.name] = str(value).strip() if value is not None else ""
        return cls(**values)

    def to_dict(self) -> Dict[str, str]:
        """Serialize using the camelCase wire names."""
        return {_WIRE_NAMES.get(k, k): v for k, v in asdict(self).items()}

    def is_empty(self) -> bool:
        return not any(asdict(self).values())


class ProfileStore:
    """JSON file store for a single profile with an expiry time."""

    def __init__(self, path: str, ttl_seconds: float = DEFAULT_TTL_SECONDS, clock=time.time):
        self.path = Path(path)
        self.ttl_seconds = ttl_seconds
        self._clock = clock

    def _now_ms(self) -> int:
        return int(self._clock() * 1000)

    def save(self, profile: Profile) -> None:
        """Save the profile and restart its expiry window."""
        session = {
            "profile": profile.to_dict(),
            "expiresAt": self._now_ms() + int(self.ttl_seconds * 1000),
        }
        self.path.parent.mkdir(parents=True, exist_ok=True)
        with open(self.path, "w", encoding="utf-8") as f:
            json.dump(session, f, indent=2)
        logger.info(f"Profile saved to {self.path}")

    def _read_session(self) -> Optional[Dict[str, Any]]:
        if not self.path.exists():
            return None

        try:
            with open(self.path, "r", encoding="utf-8") as f:
                session = json.load(f)
            expires_at = int(session["expiresAt"])
        except (OSError, ValueError, KeyError, TypeError) as e:
            logger.warning(f"Discarding unreadable profile file {self.path}: {e}")
            self.clear()
            return None

        if expires_at < self._now_ms():
            logger.info("Stored profile expired")
            self.clear()
            return None

        return session

    def load(self) -> Optional[Profile]:
        """Load the stored profile, or None if missing or expired."""
        session = self._read_session()
        if session is None:
            return None
        return Profile.from_dict(session.get("profile"))

    def clear(self) -> None:
        """Remove the stored profile."""
        if self.path.exists():
            self.path.unlink()

    def is_valid(self) -> bool:
        return self._read_session() is not None

    def remaining_hours(self) -> int:
        """Whole hours left before the stored profile expires."""
        session = self._read_session()
        if session is None:
            return 0
        remaining = int(session["expiresAt"]) - self._now_ms()
        return max(0, remaining // (60 * 60 * 1000))


def get_profile_store() -> ProfileStore:
    """Profile store at the configured location."""
    from ..config import get_config
    config = get_config()
    return ProfileStore(config.profile_file, ttl_seconds=config.profile_ttl_days * 24 * 60 * 60)


def load_profile_file(path: str) -> Profile:
    """Read a profile from a plain JSON file."""
    with open(path, "r", encoding="utf-8") as f:
        data = json.load(f)
    # Accept both a bare profile and a stored session
    if isinstance(data, dict) and isinstance(data.get("profile"), dict):
        data = data["profile"]
    return Profile.from_dict(data)


__all__ = [
    'Profile',
    'ProfileStore',
    'get_profile_store',
    'load_profile_file'
]
