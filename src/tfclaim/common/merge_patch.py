"""JSON merge patch (RFC 7386) over plain ``dict`` documents."""

from __future__ import annotations

import copy
from typing import Any

type Document = dict[str, Any]


def create_merge_patch(original: Document, modified: Document) -> Document:
    """Return the merge patch that turns ``original`` into ``modified``.

    Removed keys map to ``None``; nested mappings are diffed recursively and
    everything else (lists included) is replaced wholesale. Identical inputs
    yield an empty patch.
    """

    patch: Document = {}
    for key in original:
        if key not in modified:
            patch[key] = None
    for key, value in modified.items():
        if key not in original:
            patch[key] = copy.deepcopy(value)
            continue
        previous = original[key]
        if isinstance(previous, dict) and isinstance(value, dict):
            nested = create_merge_patch(previous, value)  # pyright: ignore[reportUnknownArgumentType]
            if nested:
                patch[key] = nested
        elif previous != value or type(previous) is not type(value):
            patch[key] = copy.deepcopy(value)
    return patch


def apply_merge_patch(target: Any, patch: Any) -> Any:
    """Apply ``patch`` to ``target`` and return the result without mutating either."""

    if not isinstance(patch, dict):
        return copy.deepcopy(patch)
    result: Document = copy.deepcopy(target) if isinstance(target, dict) else {}
    for key, value in patch.items():
        if value is None:
            result.pop(key, None)
        else:
            result[key] = apply_merge_patch(result.get(key), value)
    return result
