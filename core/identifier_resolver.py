"""Merge candidate identifier lists into one ordered, deduplicated list."""
from typing import Iterable, List, Optional


def resolve_identifiers(*candidate_lists: Iterable[str]) -> List[str]:
    """
    Concatenate candidate lists and drop repeats, keeping first-seen order.

    Lists are taken in the order given, so callers pass higher-trust sources
    first. Identifiers are never re-sorted or filtered beyond deduplication.
    """
    seen = set()
    resolved: List[str] = []
    for candidates in candidate_lists:
        for identifier in candidates or ():
            if not identifier or identifier in seen:
                continue
            seen.add(identifier)
            resolved.append(identifier)
    return resolved


def primary_identifier(identifiers: List[str]) -> Optional[str]:
    return identifiers[0] if identifiers else None
