"""String similarity helpers used across the classification pipeline.

All functions are pure and return scores in the 0.0 - 1.0 range
(unlike RapidFuzz scorers, which use 0 - 100).

Example:
    advanced_similarity("Construcción", "construccion")   # 1.0
    advanced_similarity("Herramientas", "Herramientas Manuales")  # 0.571...
    token_overlap("Martillo Truper 16oz", "Martillo Stanley 16oz")  # 0.5
"""
import re
import unicodedata

from rapidfuzz.distance import Levenshtein

_NON_ALNUM_RE = re.compile(r"[^a-z0-9\s]")
_WHITESPACE_RE = re.compile(r"\s+")
_SLUG_INVALID_RE = re.compile(r"[^a-z0-9\s-]")
_SLUG_DASHES_RE = re.compile(r"[\s-]+")


def strip_diacritics(text: str) -> str:
    """Remove combining marks: "eléctrico" -> "electrico", "ñ" -> "n"."""
    decomposed = unicodedata.normalize("NFD", text)
    return "".join(ch for ch in decomposed if not unicodedata.combining(ch))


def normalize(text: str) -> str:
    """Normalize text for comparison.

    Lowercases, strips diacritics, replaces anything that is not
    ``[a-z0-9]`` or whitespace with a space and collapses whitespace.
    """
    folded = strip_diacritics(text.lower())
    spaced = _NON_ALNUM_RE.sub(" ", folded)
    return _WHITESPACE_RE.sub(" ", spaced).strip()


def levenshtein_similarity(a: str, b: str) -> float:
    """1 - edit_distance / max_length; 0.0 when both strings are empty."""
    max_len = max(len(a), len(b))
    if max_len == 0:
        return 0.0
    return 1.0 - Levenshtein.distance(a, b) / max_len


def substring_boost(a: str, b: str) -> float:
    """Length ratio when one normalized string contains the other."""
    norm_a = normalize(a)
    norm_b = normalize(b)
    if norm_a == norm_b:
        return 1.0 if norm_a else 0.0
    if norm_b in norm_a or norm_a in norm_b:
        shorter, longer = sorted((len(norm_a), len(norm_b)))
        return shorter / longer
    return 0.0


def advanced_similarity(a: str, b: str) -> float:
    """Similarity of two names after normalization.

    Equality scores 1.0, containment scores the length ratio, anything
    else falls back to Levenshtein similarity. Strings that normalize to
    nothing carry no evidence and score 0.0.
    """
    norm_a = normalize(a)
    norm_b = normalize(b)
    if not norm_a and not norm_b:
        return 0.0
    if norm_a == norm_b:
        return 1.0
    if norm_b in norm_a or norm_a in norm_b:
        shorter, longer = sorted((len(norm_a), len(norm_b)))
        return shorter / longer
    return levenshtein_similarity(norm_a, norm_b)


def tokenize(text: str) -> set[str]:
    """Set of normalized whitespace-separated words."""
    normalized = normalize(text)
    return set(normalized.split()) if normalized else set()


def token_overlap(a: str, b: str) -> float:
    """Jaccard similarity of the normalized word sets of a and b."""
    tokens_a = tokenize(a)
    tokens_b = tokenize(b)
    union = tokens_a | tokens_b
    if not union:
        return 0.0
    return len(tokens_a & tokens_b) / len(union)


def slugify(text: str) -> str:
    """Build a category id slug: "Material Eléctrico" -> "material-electrico"."""
    folded = strip_diacritics(text.lower())
    cleaned = _SLUG_INVALID_RE.sub("", folded)
    return _SLUG_DASHES_RE.sub("-", cleaned).strip("-")


def title_case(key: str) -> str:
    """Display name for a category key: "material-electrico" -> "Material Electrico"."""
    words = key.replace("-", " ").replace("_", " ").split()
    return " ".join(word[:1].upper() + word[1:] for word in words)
