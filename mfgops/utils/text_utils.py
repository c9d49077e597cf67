import re
from typing import Iterable, List, Optional

_SEPARATORS = re.compile(r"[-_\s]+")


def normalize_text(text: Optional[str]) -> str:
    """Trim and lowercase; used for duplicate detection on names and categories."""
    return (text or "").strip().lower()


def compact_text(text: Optional[str]) -> str:
    """Normalized text with spaces, dashes and underscores removed."""
    return _SEPARATORS.sub("", normalize_text(text))


def levenshtein_distance(a: str, b: str) -> int:
    """Edit distance between two strings after compaction."""
    a, b = compact_text(a), compact_text(b)
    if a == b:
        return 0
    if not a:
        return len(b)
    if not b:
        return len(a)

    previous = list(range(len(b) + 1))
    for i, ca in enumerate(a, start=1):
        current = [i]
        for j, cb in enumerate(b, start=1):
            cost = 0 if ca == cb else 1
            current.append(min(
                previous[j] + 1,         # deletion
                current[j - 1] + 1,      # insertion
                previous[j - 1] + cost,  # substitution
            ))
        previous = current
    return previous[-1]


def are_strings_similar(a: str, b: str, threshold: int = 2) -> bool:
    if not compact_text(a) or not compact_text(b):
        return False
    if compact_text(a) == compact_text(b):
        return True
    return levenshtein_distance(a, b) <= threshold


def find_similar_items(search_term: str, items: Iterable, exclude_id: Optional[str] = None, threshold: int = 2) -> List:
    """Items (anything with .id and .name) whose name is within `threshold` edits of search_term."""
    return [
        item for item in items
        if item.id != exclude_id and are_strings_similar(search_term, item.name, threshold)
    ]
