"""Structural diff of nested attribute trees.

Migrations always write back the whole transformed record, so the engine
only needs to know *whether* two trees differ. ``diff`` additionally
reports which keys changed, which is handy when debugging a transform.
"""

from collections.abc import Mapping, Sequence
from typing import Any

_MISSING = object()


def _as_tree(value: Any) -> Mapping | None:
    if isinstance(value, Mapping):
        return value
    if isinstance(value, Sequence) and not isinstance(value, (str, bytes, bytearray)):
        return dict(enumerate(value))
    return None


def _subtrees(new_value: Any, old_value: Any) -> tuple[Mapping, Mapping] | None:
    new_sub, old_sub = _as_tree(new_value), _as_tree(old_value)
    if new_sub is None or old_sub is None:
        return None
    # A mapping and a list are never the same value.
    if isinstance(new_value, Mapping) != isinstance(old_value, Mapping):
        return None
    return new_sub, old_sub


def _identical(a: Any, b: Any) -> bool:
    return type(a) is type(b) and a == b


def diff(new_tree: Mapping, old_tree: Mapping) -> dict[str, Any]:
    """Collect the keys at which two trees differ.

    A changed key maps to the old value (or a nested diff), a key only in
    ``new_tree`` maps to None, and a key only in ``old_tree`` maps to its
    old value. Neither input is modified.

    Args:
        new_tree: The transformed tree
        old_tree: The tree before the transform

    Returns:
        Mapping of differing keys; empty when the trees are identical
    """
    result: dict[Any, Any] = {}
    remaining = dict(old_tree)

    for key, value in new_tree.items():
        old_value = remaining.pop(key, _MISSING)
        if old_value is _MISSING:
            result[key] = None
            continue

        subtrees = _subtrees(value, old_value)
        if subtrees is not None:
            nested = diff(*subtrees)
            if nested:
                result[key] = nested
        elif not _identical(value, old_value):
            result[key] = old_value

    result.update(remaining)
    return result


def differs(new_tree: Mapping, old_tree: Mapping) -> bool:
    """Check whether two nested trees differ anywhere.

    Values are compared by type and value, so ``1``, ``1.0`` and ``True``
    are all different, as are a mapping and a list. Lists are compared
    element by element.

    Args:
        new_tree: The transformed tree
        old_tree: The tree before the transform

    Returns:
        True if any key was added, removed, or changed at any depth
    """
    if len(new_tree) != len(old_tree):
        return True

    for key, value in new_tree.items():
        if key not in old_tree:
            return True
        old_value = old_tree[key]
        subtrees = _subtrees(value, old_value)
        if subtrees is not None:
            if differs(*subtrees):
                return True
        elif not _identical(value, old_value):
            return True

    return False
