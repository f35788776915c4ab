from typing import List, Tuple

from .normalize import compute_digest
from .storage import PasteStore


def find_digest_mismatches(store: PasteStore) -> Tuple[int, List[dict]]:
    """
    Recompute the SHA-256 of every stored content row.

    Returns:
        (rows checked, list of {"key", "stored", "actual"} for rows that differ)
    """
    checked = 0
    mismatches = []
    for key, content, digest in store.iter_contents():
        checked += 1
        actual = compute_digest(content)
        if actual != digest:
            mismatches.append({"key": key, "stored": digest, "actual": actual})
    return checked, mismatches
