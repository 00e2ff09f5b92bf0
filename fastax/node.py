"""
Records shared by the store, the merge engine and the renderers.

``Taxon`` is what a taxonomy store hands out: one row of the dump with its
names and metadata. ``Node`` is what a merged tree is made of: identity,
label fields and the children it owns, in arrival order.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Dict, List, Optional

SCIENTIFIC_NAME = "scientific name"
NO_RANK = "no rank"


@dataclass
class Taxon:
    taxid: int
    parent_taxid: int
    rank: str
    names: Dict[str, List[str]] = field(default_factory=dict)
    division: str = ""
    genetic_code: str = ""
    mito_genetic_code: Optional[str] = None  # not all organisms have mitochondria
    comments: Optional[str] = None

    @property
    def name(self) -> str:
        scinames = self.names.get(SCIENTIFIC_NAME)
        return scinames[0] if scinames else str(self.taxid)

    @property
    def is_root(self) -> bool:
        return self.taxid == self.parent_taxid


@dataclass(frozen=True, eq=False)
class Node:
    """
    One taxon in a merged tree.

    Only the merge engine appends to ``children``; once the merge returns the
    tree is read-only. Nodes compare by identity.
    """
    taxid: int
    name: str
    rank: str
    children: List[Node] = field(default_factory=list)

    @classmethod
    def from_record(cls, record) -> Node:
        return cls(taxid=record.taxid, name=record.name, rank=record.rank)

    @property
    def is_leaf(self) -> bool:
        return not self.children

    def walk(self):
        """Yield this node and every descendant, depth first, in stored order."""
        stack = [self]
        while stack:
            node = stack.pop()
            yield node
            stack.extend(reversed(node.children))

    def __repr__(self) -> str:
        return f"Node({self.taxid}, {self.name!r}, {self.rank!r}, children={len(self.children)})"
