"""Helpers for reading activity-queue entries.

Entries are either positional command arrays (``['config', 'G-XXXX']``) or keyed
objects (``{'event': 'gtm.js'}``). Arguments-style objects captured from
``gtag()`` calls (``{'0': 'config', '1': 'G-XXXX'}``) are read as commands.
"""
from typing import Any, Dict, Iterator, List, Optional


def as_command(entry: Any) -> Optional[List[Any]]:
    """Return the entry as a positional command, or None."""
    if isinstance(entry, (list, tuple)):
        return list(entry)
    if isinstance(entry, dict) and "0" in entry:
        items = []
        index = 0
        while str(index) in entry:
            items.append(entry[str(index)])
            index += 1
        return items
    return None


def as_object(entry: Any) -> Optional[Dict[str, Any]]:
    """Return the entry as a keyed object, or None for commands and scalars."""
    if isinstance(entry, dict) and "0" not in entry:
        return entry
    return None


def command_name(entry: Any) -> Optional[str]:
    command = as_command(entry)
    if command and isinstance(command[0], str):
        return command[0]
    return None


def iter_objects(entry: Any) -> Iterator[Dict[str, Any]]:
    """Yield the entry itself if it is an object, plus object arguments of a command."""
    obj = as_object(entry)
    if obj is not None:
        yield obj
        return
    for item in as_command(entry) or []:
        if isinstance(item, dict):
            yield item


def iter_strings(entry: Any) -> Iterator[str]:
    """Yield every string value in an entry, one level into command arguments."""
    obj = as_object(entry)
    if obj is not None:
        for value in obj.values():
            if isinstance(value, str):
                yield value
        return
    for item in as_command(entry) or []:
        if isinstance(item, str):
            yield item
        elif isinstance(item, dict):
            for value in item.values():
                if isinstance(value, str):
                    yield value
