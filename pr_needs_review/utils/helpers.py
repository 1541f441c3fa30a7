"""
Utilitaires divers — PR Needs Review.
"""

from __future__ import annotations

from datetime import datetime, timezone


def contains_phrase(text: str | None, phrase: str) -> bool:
    """Recherche insensible à la casse d'une sous-chaîne."""
    if not text or not phrase:
        return False
    return phrase.casefold() in text.casefold()


def as_utc(value: datetime | None) -> datetime | None:
    """Normalise un datetime en UTC (les datetimes naïfs sont supposés UTC)."""
    if value is None:
        return None
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc)


def truncate(text: str, max_len: int = 80) -> str:
    """Tronque un texte pour l'affichage."""
    if len(text) <= max_len:
        return text
    return text[: max_len - 1] + "…"
