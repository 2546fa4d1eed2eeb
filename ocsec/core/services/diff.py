"""
Structural diff — field-level differences between two nested data trees.

Generic over mappings: nested mappings are walked, everything else
(scalars, lists) is an opaque leaf compared by canonical JSON. This module
knows nothing about security; regression detection lives elsewhere.
"""

from __future__ import annotations

import json
from collections.abc import Mapping
from typing import Any

from ocsec.core.models.analysis import DiffEntry


def _canonical(value: Any) -> str:
    return json.dumps(value, sort_keys=True, separators=(",", ":"), default=str)


def diff(a: Mapping[str, Any], b: Mapping[str, Any], prefix: str = "") -> list[DiffEntry]:
    """Diff two trees.

    Args:
        a: The "before" tree.
        b: The "after" tree.
        prefix: Dotted path of ``a``/``b`` inside a larger tree.

    Returns:
        One entry per added, removed or changed leaf path. Order follows
        the keys of ``a`` then the keys only in ``b``; callers must not
        rely on it beyond grouping by path.

    Raises:
        TypeError: If either argument is not a mapping.
    """
    if not isinstance(a, Mapping) or not isinstance(b, Mapping):
        raise TypeError(
            f"diff() needs two mappings, got {type(a).__name__} and {type(b).__name__}"
        )

    entries: list[DiffEntry] = []
    keys = list(a.keys()) + [k for k in b.keys() if k not in a]

    for key in keys:
        path = f"{prefix}.{key}" if prefix else str(key)

        if key not in a:
            entries.append(DiffEntry(path=path, kind="added", new_value=b[key]))
            continue
        if key not in b:
            entries.append(DiffEntry(path=path, kind="removed", old_value=a[key]))
            continue

        old, new = a[key], b[key]
        if isinstance(old, Mapping) and isinstance(new, Mapping):
            entries.extend(diff(old, new, path))
        elif _canonical(old) != _canonical(new):
            entries.append(DiffEntry(path=path, kind="changed", old_value=old, new_value=new))

    return entries


def summarize(entries: list[DiffEntry]) -> dict[str, int]:
    """Count entries per kind."""
    counts = {"added": 0, "removed": 0, "changed": 0}
    for entry in entries:
        counts[entry.kind] += 1
    return counts
