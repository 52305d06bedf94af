"""Generic traversal over decoded JSON values.

JSON documents here are the plain values produced by the json module:
dict, list, str, int, float, bool and None. This module is the only place
that dispatches on container type; callers work with (container, key, node)
positions instead.

Two modes:
  - collect(value, visit)      → observe every node, tree unchanged
  - rewrite(value, replace)    → replace nodes at their position
"""

from typing import Any, Callable, Iterator, Optional, Tuple, Union

Key = Union[str, int]
Position = Tuple[Optional[Union[dict, list]], Optional[Key], Any]


def children(node: Any) -> Iterator[Tuple[Key, Any]]:
    """Yield (key, child) pairs of an object or array; nothing for scalars."""
    if isinstance(node, dict):
        # Snapshot keys: callers may replace values while we iterate
        for key in list(node):
            yield key, node[key]
    elif isinstance(node, list):
        for index in range(len(node)):
            yield index, node[index]


def walk(value: Any) -> Iterator[Position]:
    """
    Lazily yield (container, key, node) for every node, depth-first.

    The root is yielded as (None, None, value). If the consumer assigns
    container[key] before resuming, traversal descends into the new value.
    """
    yield from _walk(None, None, value)


def _walk(container, key, node) -> Iterator[Position]:
    yield container, key, node
    if container is not None:
        node = container[key]
    for child_key, child in children(node):
        yield from _walk(node, child_key, child)


def collect(value: Any, visit: Callable[[Any], None]) -> None:
    """Call visit(node) on every node of value."""
    for _, _, node in walk(value):
        visit(node)


def rewrite(value: Any, replace: Callable[[Optional[Key], Any], Any]) -> Any:
    """
    Replace nodes in place.

    replace(key, node) returns the node to keep at that position; returning
    the same object leaves it untouched. Traversal continues into the
    children of a replacement.

    Returns:
        The root, which replace() may also have swapped out.
    """
    holder = [value]
    for container, key, node in _walk(holder, 0, value):
        new = replace(None if container is holder else key, node)
        if new is not node:
            container[key] = new
    return holder[0]
