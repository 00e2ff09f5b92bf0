"""
Merging lineage paths into one tree, and ancestor queries over the result.

Paths are folded in the order they are given; each one is walked fully, root
to leaf, before the next, so siblings appear in the order their query terms
first introduced them.
"""

from __future__ import annotations

import logging
from typing import Dict, Iterable, Iterator, List, Optional, Sequence, Tuple

from fastax.errors import EmptySetError, MalformedPathError, NotFoundError
from fastax.lineage import TaxonomyStore, fetch_lineage
from fastax.node import Node, Taxon

logger = logging.getLogger(__name__)

SPECIES = "species"


class LineageTree:
    """
    A merged tree plus the root path of every node in it.

    The paths make ancestor reasoning possible without parent pointers.
    """

    def __init__(self, root: Node, paths: Dict[int, Tuple[Node, ...]]):
        self.root = root
        self._paths = paths

    def __len__(self) -> int:
        return len(self._paths)

    def __contains__(self, taxid: int) -> bool:
        return taxid in self._paths

    def __iter__(self) -> Iterator[Node]:
        return self.root.walk()

    def find(self, taxid: int) -> Node:
        return self.path_to(taxid)[-1]

    def path_to(self, taxid: int) -> Tuple[Node, ...]:
        try:
            return self._paths[taxid]
        except KeyError:
            raise NotFoundError(f"{taxid} is not part of this tree") from None

    def depth(self, taxid: int) -> int:
        return len(self.path_to(taxid)) - 1

    def lca(self, taxids: Sequence[int]) -> Node:
        """
        Return the deepest node lying on the root path of every given taxid.

        Needs at least two taxids; a repeated taxid is allowed and a taxid
        paired with one of its ancestors yields that ancestor.
        """
        if len(taxids) < 2:
            raise EmptySetError("The lowest common ancestor needs at least two taxa")

        paths = [self.path_to(taxid) for taxid in taxids]
        common = self.root
        for column in zip(*paths):
            first = column[0]
            if any(node is not first for node in column[1:]):
                break
            common = first
        return common


# ----------------------------
# Merge
# ----------------------------

def merge(paths: Iterable[Sequence], root_taxid: Optional[int] = None) -> LineageTree:
    """
    Fold lineage paths (root first) into a single tree.

    Each record only needs ``taxid``, ``name`` and ``rank``. Records already
    seen at a position are reused; new ones are appended to their parent's
    children. ``root_taxid`` defaults to the first element of the first path.
    """
    root: Optional[Node] = None
    index: Dict[int, Tuple[Node, ...]] = {}
    child_maps: Dict[int, Dict[int, Node]] = {}
    merged = 0

    for count, path in enumerate(paths):
        if not path:
            raise MalformedPathError(f"Lineage path #{count} is empty")

        head = path[0]
        if root is None:
            if root_taxid is not None and head.taxid != root_taxid:
                raise MalformedPathError(
                    f"Lineage path #{count} starts at {head.taxid}, expected {root_taxid}"
                )
            root = Node.from_record(head)
            index[root.taxid] = (root,)
        elif head.taxid != root.taxid:
            raise MalformedPathError(
                f"Lineage path #{count} starts at {head.taxid}, expected {root.taxid}"
            )

        current = root
        for record in path[1:]:
            siblings = child_maps.setdefault(current.taxid, {})
            child = siblings.get(record.taxid)
            if child is None:
                if record.taxid in index:
                    raise MalformedPathError(
                        f"{record.taxid} is reached through two different parents"
                    )
                child = Node.from_record(record)
                current.children.append(child)
                siblings[child.taxid] = child
                index[child.taxid] = index[current.taxid] + (child,)
            current = child
        merged += 1

    if root is None:
        raise MalformedPathError("No lineage path to merge")

    logger.debug("Merged %d lineages into %d nodes", merged, len(index))
    return LineageTree(root, index)


# ----------------------------
# Builders over a store
# ----------------------------

def make_tree(store: TaxonomyStore, taxids: Sequence[int]) -> LineageTree:
    """Merge the lineages of ``taxids``, in order."""
    return merge(fetch_lineage(store, taxid) for taxid in taxids)


def _descending_paths(store: TaxonomyStore, taxid: int, species: bool) -> Iterator[List[Taxon]]:
    """Yield the path from ``taxid`` to each of its tips, in store order."""
    stack: List[List[Taxon]] = [[store.get_taxon(taxid)]]
    while stack:
        path = stack.pop()
        tip = path[-1]
        children = [] if species and tip.rank == SPECIES else store.get_children(tip.taxid)
        if not children:
            yield path
            continue
        for child in reversed(children):
            stack.append(path + [store.get_taxon(child)])


def make_subtree(store: TaxonomyStore, taxid: int, species: bool = False) -> LineageTree:
    """
    Build the tree rooted at ``taxid`` holding all of its descendants.

    With ``species`` the descent stops at species, so subspecies, strains
    and the like are left out.
    """
    return merge(_descending_paths(store, taxid, species), root_taxid=taxid)
