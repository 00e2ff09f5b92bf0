"""
Interop with Biopython's Bio.Phylo.

Merged trees can be written in the standard tree formats Bio.Phylo knows
(Newick, NEXUS, phyloXML), and tree files in those formats can be read back
as a merged tree so the box renderer can draw them.

Dependencies:
  - biopython: pip install biopython
"""

from __future__ import annotations

from io import BytesIO, StringIO
from typing import AbstractSet, Iterator, List, NamedTuple

from Bio import Phylo
from Bio.Phylo.BaseTree import Clade, Tree
from Bio.Phylo.NewickIO import NewickError

from fastax.collapse import Mode, displayed_children
from fastax.errors import TreeFormatError
from fastax.labels import COMPACT_FORMAT, expand
from fastax.node import NO_RANK, Node
from fastax.tree import LineageTree, merge

EXPORT_FORMATS = ("newick", "nexus", "phyloxml")


class _Record(NamedTuple):
    taxid: int
    name: str
    rank: str


# ----------------------------
# fastax -> Bio.Phylo
# ----------------------------

def _to_clade(node: Node, mode: Mode, format_spec: str, keep: AbstractSet[int]) -> Clade:
    clade = Clade(name=expand(format_spec, node))
    clade.clades = [
        _to_clade(child, mode, format_spec, keep)
        for child, _ in displayed_children(node, mode, keep)
    ]
    return clade


def to_phylo(
    root: Node,
    mode: Mode = Mode.COMPACT,
    format_spec: str = COMPACT_FORMAT,
    keep: AbstractSet[int] = frozenset(),
) -> Tree:
    """Convert the shown part of a merged tree to a rooted Bio.Phylo tree."""
    return Tree(root=_to_clade(root, mode, format_spec, keep), rooted=True)


def export(
    root: Node,
    fmt: str = "newick",
    mode: Mode = Mode.COMPACT,
    format_spec: str = COMPACT_FORMAT,
    keep: AbstractSet[int] = frozenset(),
) -> str:
    """Serialize a merged tree in one of ``EXPORT_FORMATS``."""
    if fmt not in EXPORT_FORMATS:
        raise ValueError(f"Unsupported tree format: {fmt}")
    tree = to_phylo(root, mode, format_spec, keep)
    if fmt == "phyloxml":
        # written through ElementTree, which wants a binary handle
        raw = BytesIO()
        Phylo.write(tree, raw, fmt)
        return raw.getvalue().decode("utf-8").rstrip("\n")
    out = StringIO()
    if fmt == "newick":
        # topology only, no branch lengths to write
        Phylo.write(tree, out, fmt, plain=True)
    else:
        Phylo.write(tree, out, fmt)
    return out.getvalue().rstrip("\n")


# ----------------------------
# Bio.Phylo -> fastax
# ----------------------------

def _label(clade) -> str:
    # Biopython stores names in clade.name (may be None)
    return str(clade.name) if clade.name is not None else ""


def _clade_paths(root) -> Iterator[List[_Record]]:
    """
    Yield the root-to-tip record path of every tip, left to right.

    Clades carry no identifiers, so they are numbered in preorder from 1.
    """
    next_id = 1
    stack = [(root, [])]
    while stack:
        clade, parents = stack.pop()
        path = parents + [_Record(next_id, _label(clade), NO_RANK)]
        next_id += 1
        if not clade.clades:
            yield path
            continue
        for child in reversed(clade.clades):
            stack.append((child, path))


def from_phylo(tree) -> LineageTree:
    """Convert a Bio.Phylo tree (or clade) into a merged tree."""
    root = getattr(tree, "root", tree)
    return merge(_clade_paths(root))


def read_tree(source, fmt: str = "newick") -> LineageTree:
    """Read a single tree from a path or handle with Bio.Phylo."""
    try:
        tree = Phylo.read(source, fmt)
    except (NewickError, ValueError) as e:
        # Phylo.read raises ValueError for an empty file or several trees
        raise TreeFormatError(f"Cannot read a {fmt} tree from {source}: {e}") from e
    return from_phylo(tree)
