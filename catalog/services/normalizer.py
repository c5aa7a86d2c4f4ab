"""
Text Normalizer

Diacritic- and case-insensitive matching helpers for catalog search.

    >>> normalize("  José ")
    'jose'
    >>> to_fuzzy_pattern("jose")
    'j[oóòöô]s[eéèëê]'

The pattern is matched against the stored title/author, which are kept
in case-folded NFC form (see fold_text), so "José" and "jose" find the
same books.
"""

import re
import unicodedata

# Accented variants accepted for each foldable base letter
ACCENT_CLASSES: dict[str, str] = {
    "a": "[aáàäâ]",
    "e": "[eéèëê]",
    "i": "[iíìïî]",
    "o": "[oóòöô]",
    "u": "[uúùüû]",
    "n": "[nñ]",
    "c": "[cç]",
}

_ISBN_SEPARATORS_RE = re.compile(r"[-\s]")


def _strip_marks(text: str) -> str:
    decomposed = unicodedata.normalize("NFD", text)
    return "".join(ch for ch in decomposed if not unicodedata.combining(ch))


def normalize(text: str | None) -> str:
    """
    Fold case and strip combining diacritical marks.

    NFD splits "é" into "e" + U+0301; the combining marks are dropped and
    the rest is lowercased and trimmed.
    """
    if not text:
        return ""
    return _strip_marks(text).lower().strip()


def to_fuzzy_pattern(normalized: str) -> str:
    """
    Build a regular expression matching any accented spelling of a
    normalized string.

    Foldable letters become character classes; every other character is
    escaped and matched literally.
    """
    return "".join(ACCENT_CLASSES.get(ch) or re.escape(ch) for ch in normalized)


def fold_text(text: str) -> str:
    """Canonical stored form of titles and author names."""
    return unicodedata.normalize("NFC", text.strip()).lower()


def clean_isbn(text: str) -> str:
    """Remove hyphens and whitespace from an ISBN; the check digit X is uppercased."""
    return _ISBN_SEPARATORS_RE.sub("", text).upper()


def query_pattern(query: str) -> str:
    """
    Fuzzy pattern for a raw search query.

    Same as to_fuzzy_pattern(normalize(query)), except that an accented
    letter outside ACCENT_CLASSES also matches itself. Typing a stored
    title exactly ("São Paulo") therefore always finds it, while "sao"
    only bridges the accents listed above.

        >>> query_pattern("São")
        's(?:[aáàäâ]|ã)[oóòöô]'
    """
    pieces = []
    for ch in fold_text(query):
        base = _strip_marks(ch)
        piece = to_fuzzy_pattern(base)
        if ch != base and ch not in piece:
            piece = f"(?:{piece}|{re.escape(ch)})"
        pieces.append(piece)
    return "".join(pieces)
