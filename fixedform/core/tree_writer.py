"""Path-based writes into a mutable output tree.

Paths are dot-separated; a segment may end with the array marker:

    set_value(tree, "Customer.Name", "Ann")      # {"Customer": {"Name": "Ann"}}
    set_value(tree, "Items[].Total", 136)        # Total on the newest Items element

The writer never fails on an odd path or an unexpected tree shape. It
materializes whatever structure the path needs: missing objects and arrays
are created, and when the cursor sits on an array the write targets the
array's newest object element (appending a fresh one when needed).
"""

import logging
from typing import Any, Callable

from fixedform.core.config import Markers

logger = logging.getLogger(__name__)

RepairCallback = Callable[[str, str], None]
"""Called as ``on_repair(path, description)`` for every structural repair."""


def set_value(
    tree: dict[str, Any],
    path: str,
    value: Any,
    on_repair: RepairCallback | None = None,
) -> None:
    """Write value at path, creating intermediate structure as needed.

    Args:
        tree: Root object to write into.
        path: Dotted path with optional ``[]`` markers. Blank paths are ignored.
        value: Value to store.
        on_repair: Optional callback notified when an unexpected shape is
            replaced or wrapped.
    """
    if not path or not path.strip():
        return

    def repaired(description: str) -> None:
        logger.debug(f"Structural repair at {path!r}: {description}")
        if on_repair:
            on_repair(path, description)

    parts = path.split(Markers.PATH_SEPARATOR)
    cursor: Any = tree
    i = 0
    # A segment is revisited after the cursor steps from an array onto its
    # newest object element, so the index only advances on real progress.
    while i < len(parts):
        part = parts[i]
        last = i == len(parts) - 1

        if isinstance(cursor, list):
            if last and not part.endswith(Markers.ARRAY):
                cursor.append({part: value})
                return
            cursor = _newest_object(cursor)
            continue

        if part.endswith(Markers.ARRAY):
            name = part[: -len(Markers.ARRAY)]
            existing = cursor.get(name)
            if not isinstance(existing, list):
                if existing is not None:
                    repaired(f"replaced {type(existing).__name__} at {name!r} with an array")
                existing = []
                cursor[name] = existing
            if last:
                # A bare array path only selects the array; there is no field to set.
                return
            cursor = existing
            i += 1
            continue

        if last:
            cursor[part] = value
            return

        cursor = _descend(cursor, part, repaired)
        i += 1


def _descend(obj: dict[str, Any], key: str, repaired: Callable[[str], None]) -> Any:
    """Step into obj[key], creating an object when it is missing or a scalar."""
    nxt = obj.get(key)
    if isinstance(nxt, (dict, list)):
        return nxt
    if nxt is not None:
        repaired(f"replaced {type(nxt).__name__} at {key!r} with an object")
    nxt = {}
    obj[key] = nxt
    return nxt


def _newest_object(arr: list[Any]) -> dict[str, Any]:
    """Last element of arr, appending a fresh object if it is not one."""
    if arr and isinstance(arr[-1], dict):
        return arr[-1]
    obj: dict[str, Any] = {}
    arr.append(obj)
    return obj
