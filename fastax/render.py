"""
Text renderers for merged trees.

Both renderers walk the tree through the collapse view, so the same ``mode``
and ``keep`` arguments decide which nodes appear.

Box tree, one line per shown node:

     ─┬─ no rank: root
      └─┬─ no rank: cellular organisms
        ├── species: Escherichia coli
        └─┬─ clade: Opisthokonta
          ...

Compact dialect, where an internal node's label sits next to its own group
inside its parent's group, terminated by ``;``:

    (cellular organisms,(Escherichia coli,Opisthokonta,(...)));
"""

from __future__ import annotations

from typing import AbstractSet, List, Sequence

from fastax.collapse import Mode, collapse, displayed_children
from fastax.labels import BOX_FORMAT, COMPACT_FORMAT, expand
from fastax.node import NO_RANK, Node
from fastax.tree import merge


# ----------------------------
# Box tree
# ----------------------------

BRANCH = "─┬─"
TIP = "──"
MIDDLE = "├"
LAST = "└"
VERTICAL = " │"
BLANK = "  "


def render_box_tree(
    root: Node,
    mode: Mode = Mode.COMPACT,
    format_spec: str = BOX_FORMAT,
    keep: AbstractSet[int] = frozenset(),
) -> str:
    """
    Render the tree under ``root`` with box-drawing connectors.

    Each shown node gets two columns of indentation per depth level. The
    connector tells whether the node is the last of its siblings (``└``
    rather than ``├``, and no ``│`` continuation below it) and whether it
    has shown children (``─┬─`` rather than ``──``).
    """
    lines: List[str] = []
    # one entry per shown ancestor below the root: True while siblings follow it
    trail: List[bool] = []

    for row in collapse(root, mode, keep):
        label = expand(format_spec, row.node)
        glyph = BRANCH if row.has_children else TIP
        if row.depth == 0:
            lines.append(f" {glyph} {label}")
            continue

        del trail[row.depth - 1:]
        indent = "".join(VERTICAL if more else BLANK for more in trail)
        corner = LAST if row.is_last else MIDDLE
        lines.append(f" {indent} {corner}{glyph} {label}")
        trail.append(not row.is_last)

    return "\n".join(lines)


def render_lineage(path: Sequence, format_spec: str = BOX_FORMAT, ranks_only: bool = False) -> str:
    """
    Render a single lineage (root first) as a box tree.

    A lineage is a chain, so every node is shown. With ``ranks_only`` the
    nodes without a named rank are dropped, the root excepted.
    """
    if ranks_only:
        path = [record for i, record in enumerate(path) if i == 0 or record.rank != NO_RANK]
    tree = merge([path])
    return render_box_tree(tree.root, Mode.FULL, format_spec)


# ----------------------------
# Compact dialect
# ----------------------------

def render_compact(
    root: Node,
    mode: Mode = Mode.COMPACT,
    format_spec: str = COMPACT_FORMAT,
    keep: AbstractSet[int] = frozenset(),
) -> str:
    """
    Render the tree under ``root`` in the compact parenthesized dialect.

    A leaf is its label. Any other node is its label, a comma, then its shown
    children in parentheses, whatever their number: a chain ``a -> b -> c``
    gives ``(a,(b,(c)));``. When the root has exactly one shown child the
    root label is left out and the output starts from that child.
    """
    kids = displayed_children(root, mode, keep)
    top = kids[0][0] if len(kids) == 1 else root
    return "(" + _entry(top, mode, format_spec, keep) + ");"


def _entry(node: Node, mode: Mode, format_spec: str, keep: AbstractSet[int]) -> str:
    label = expand(format_spec, node)
    kids = displayed_children(node, mode, keep)
    if not kids:
        return label
    group = ",".join(_entry(child, mode, format_spec, keep) for child, _ in kids)
    return f"{label},({group})"
