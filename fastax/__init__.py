"""Explore the NCBI Taxonomy from a local copy."""

from fastax.collapse import Mode, collapse
from fastax.errors import (
    DumpFormatError,
    EmptySetError,
    FastaxError,
    MalformedPathError,
    NotFoundError,
    TreeFormatError,
)
from fastax.labels import expand
from fastax.node import Node, Taxon
from fastax.render import render_box_tree, render_compact, render_lineage
from fastax.tree import LineageTree, make_subtree, make_tree, merge

__version__ = "0.4.0"

__all__ = [
    "DumpFormatError",
    "EmptySetError",
    "FastaxError",
    "LineageTree",
    "MalformedPathError",
    "Mode",
    "Node",
    "NotFoundError",
    "Taxon",
    "TreeFormatError",
    "collapse",
    "expand",
    "make_subtree",
    "make_tree",
    "merge",
    "render_box_tree",
    "render_compact",
    "render_lineage",
]
