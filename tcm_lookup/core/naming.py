# tcm_lookup/core/naming.py
from __future__ import annotations

import hashlib


def normalize_name(name: str) -> str:
    """Lookup key for a search term: surrounding whitespace stripped, lowercased.

    The store query, the cache fingerprint and the persisted ``NameLowercase``
    field all go through this one function so they can never disagree.
    """
    return name.strip().lower()


def fingerprint(name: str) -> str:
    """SHA-256 hex digest of the normalized name; used as the cache key."""
    return hashlib.sha256(normalize_name(name).encode("utf-8")).hexdigest()
