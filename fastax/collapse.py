"""
Display view over a merged tree.

In ``Mode.FULL`` every node is shown. In ``Mode.COMPACT`` a node with exactly
one child (a unifurcation) is skipped and its descendant hangs directly from
the last shown ancestor; only the root, the branch points and the leaves
remain. Children are always visited in their stored order.
"""

from __future__ import annotations

import enum
from dataclasses import dataclass
from typing import AbstractSet, Iterator, List, Tuple

from fastax.node import Node


class Mode(enum.Enum):
    FULL = "full"
    COMPACT = "compact"


@dataclass(frozen=True)
class Row:
    node: Node
    elided: Tuple[Node, ...]  # unifurcations skipped since the previous shown ancestor
    depth: int
    is_last: bool

    @property
    def has_children(self) -> bool:
        # a collapsed chain always ends on a shown node, so any child means a shown child
        return bool(self.node.children)


def displayed_children(
    node: Node, mode: Mode = Mode.FULL, keep: AbstractSet[int] = frozenset()
) -> List[Tuple[Node, Tuple[Node, ...]]]:
    """
    Return ``(shown child, elided nodes)`` pairs for ``node``.

    A unifurcation whose taxid is in ``keep`` is shown anyway.
    """
    shown = []
    for child in node.children:
        elided = []
        if mode is Mode.COMPACT:
            while len(child.children) == 1 and child.taxid not in keep:
                elided.append(child)
                child = child.children[0]
        shown.append((child, tuple(elided)))
    return shown


def collapse(
    root: Node, mode: Mode = Mode.FULL, keep: AbstractSet[int] = frozenset()
) -> Iterator[Row]:
    """Yield the shown nodes of the tree under ``root``, depth first, root first."""
    yield Row(root, (), 0, True)
    yield from _collapse_children(root, mode, keep, 1)


def _collapse_children(node: Node, mode: Mode, keep: AbstractSet[int], depth: int) -> Iterator[Row]:
    kids = displayed_children(node, mode, keep)
    for i, (child, elided) in enumerate(kids):
        yield Row(child, elided, depth, i == len(kids) - 1)
        yield from _collapse_children(child, mode, keep, depth + 1)
