"""Text normalization shared by unit lookup, product matching and table keys."""

import re
import unicodedata
from functools import lru_cache

_WHITESPACE = re.compile(r"\s+")
_WORD_SPLIT = re.compile(r"[^a-z0-9]+")


def normalize_text(text: str | None) -> str:
    """Lowercase, strip diacritics and collapse whitespace ("Maïs  en Crème" -> "mais en creme")."""
    if not text:
        return ""
    decomposed = unicodedata.normalize("NFD", text.lower())
    stripped = "".join(ch for ch in decomposed if not unicodedata.combining(ch))
    return _WHITESPACE.sub(" ", stripped).strip()


def tokenize(text: str, min_length: int = 2) -> list[str]:
    """Words of an already-normalized string, punctuation dropped."""
    return [w for w in _WORD_SPLIT.split(text) if len(w) >= min_length]


@lru_cache(maxsize=4096)
def _word_pattern(term: str) -> re.Pattern:
    # Optional trailing s/x so "oignon" also hits "oignons" and "poireau" hits "poireaux".
    return re.compile(rf"(?<![a-z0-9]){re.escape(term)}[sx]?(?![a-z0-9])")


def contains_word(text: str, term: str) -> bool:
    """Whole-word containment on normalized strings: "ail" is in "gousse d'ail", not in "taille"."""
    if not term or not text:
        return False
    return _word_pattern(term).search(text) is not None


def mentions(name: str, key: str) -> bool:
    """Either string contains the other as whole words."""
    return contains_word(name, key) or contains_word(key, name)
