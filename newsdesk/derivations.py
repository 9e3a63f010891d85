"""
Derived and default field values.

The models carry no column defaults or update hooks; the operation
layer calls these helpers explicitly whenever it builds a row.
"""
import hashlib
import math
from datetime import datetime, timezone
from typing import Iterable, Optional
from urllib.parse import quote

WORDS_PER_MINUTE = 200

DEFAULT_AUTHOR = "Admin User"
DEFAULT_FEATURED_IMAGE = "https://images.unsplash.com/photo-1588681664899-f142ff2dc9b1"

DEFAULT_NOTIFICATION_PREFERENCES = {
    "email": {"newArticles": True, "comments": True, "replies": True, "newsletter": True},
    "push": {"newArticles": False, "comments": True},
}
DEFAULT_PRIVACY_SETTINGS = {
    "profileVisibility": "public",
    "showEmail": False,
    "showLocation": True,
}


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


def word_count(text: str) -> int:
    return len(text.split())


def read_time(content: str, explicit: Optional[int] = None) -> int:
    """Minutes to read *content*: ``ceil(words / 200)``, never below 1."""
    if explicit is not None:
        return explicit
    return max(1, math.ceil(word_count(content) / WORDS_PER_MINUTE))


def full_name(first_name: str, last_name: str) -> str:
    return f"{first_name} {last_name}".strip()


def default_avatar_url(first_name: str, last_name: str) -> str:
    """Initials image generated from the user's name."""
    name = quote(full_name(first_name, last_name), safe="")
    return f"https://ui-avatars.com/api/?name={name}&background=007bff&color=fff"


def gravatar_url(email: str, size: int = 80) -> str:
    """Identicon keyed by the md5 of the normalised email."""
    digest = hashlib.md5(normalize_email(email).encode("utf-8")).hexdigest()
    return f"https://www.gravatar.com/avatar/{digest}?d=identicon&s={size}"


def normalize_email(email: str) -> str:
    return email.strip().lower()


def normalize_tags(tags: Iterable[str]) -> list[str]:
    """Lowercase, strip and de-duplicate *tags*, keeping first-seen order."""
    seen: list[str] = []
    for tag in tags:
        tag = tag.strip().lower()
        if tag and tag not in seen:
            seen.append(tag)
    return seen


def profile_defaults(user_id: int, now: datetime) -> dict:
    """Column values for a fresh UserProfile row."""
    return {
        "user_id": user_id,
        "interests": [],
        "social_links": {},
        "reading_history": [],
        "saved_articles": [],
        "liked_articles": [],
        "notification_preferences": {
            channel: dict(prefs) for channel, prefs in DEFAULT_NOTIFICATION_PREFERENCES.items()
        },
        "privacy_settings": dict(DEFAULT_PRIVACY_SETTINGS),
        "last_active": now,
        "created_at": now,
        "updated_at": now,
    }
