"""
Lineage fetching: from a taxid to the ordered path root -> taxon.

The store is anything implementing ``TaxonomyStore``; ``TaxonomyDB`` in
``fastax.db`` is the SQLite one, ``MemoryStore`` below keeps taxa in dicts.
"""

from __future__ import annotations

import logging
from typing import Dict, Iterable, List, Protocol, Sequence

from fastax.errors import MalformedPathError, NotFoundError
from fastax.node import SCIENTIFIC_NAME, Taxon

logger = logging.getLogger(__name__)


class TaxonomyStore(Protocol):
    def get_taxon(self, taxid: int) -> Taxon: ...

    def get_taxid(self, name: str) -> int: ...

    def get_parent(self, taxid: int) -> int: ...

    def get_children(self, taxid: int) -> List[int]: ...


# ----------------------------
# Lineages
# ----------------------------

def fetch_lineage(store: TaxonomyStore, taxid: int) -> List[Taxon]:
    """
    Return the taxa from the global root down to ``taxid``, root first.

    The root is the taxon that is its own parent. Raises NotFoundError when
    ``taxid`` (or one of its ancestors) is missing from the store.
    """
    ids = [taxid]
    seen = {taxid}
    current = taxid
    while True:
        parent = store.get_parent(current)
        if parent == current:
            break
        if parent in seen:
            raise MalformedPathError(f"Cycle in the lineage of {taxid} at {parent}")
        ids.append(parent)
        seen.add(parent)
        current = parent

    ids.reverse()
    logger.debug("Lineage of %d has %d nodes", taxid, len(ids))
    return [store.get_taxon(i) for i in ids]


def fetch_lineages(store: TaxonomyStore, taxids: Iterable[int]) -> List[List[Taxon]]:
    return [fetch_lineage(store, taxid) for taxid in taxids]


# ----------------------------
# Query terms
# ----------------------------

def clean_term(term: str) -> str:
    """Trim a term and read underscores as spaces (``Homo_sapiens``)."""
    return term.strip().replace("_", " ")


def resolve_terms(store: TaxonomyStore, terms: Sequence[str]) -> List[int]:
    """
    Turn query terms into taxids, keeping the input order.

    A term is either a taxid already or an exact scientific name.
    """
    taxids: List[int] = []
    for term in terms:
        term = clean_term(term)
        try:
            taxid = int(term)
        except ValueError:
            taxid = store.get_taxid(term)
        else:
            # make sure numeric terms exist too
            store.get_taxon(taxid)
        taxids.append(taxid)
    return taxids


# ----------------------------
# In-memory store
# ----------------------------

class MemoryStore:
    """A TaxonomyStore over taxa held in memory; children keep insertion order."""

    def __init__(self, taxa: Iterable[Taxon] = ()):
        self._taxa: Dict[int, Taxon] = {}
        self._children: Dict[int, List[int]] = {}
        self._by_name: Dict[str, int] = {}
        for taxon in taxa:
            self.add(taxon)

    def add(self, taxon: Taxon) -> None:
        if taxon.taxid in self._taxa:
            raise ValueError(f"Duplicate taxid: {taxon.taxid}")
        self._taxa[taxon.taxid] = taxon
        if not taxon.is_root:
            self._children.setdefault(taxon.parent_taxid, []).append(taxon.taxid)
        for name in taxon.names.get(SCIENTIFIC_NAME, []):
            self._by_name.setdefault(name, taxon.taxid)

    def __len__(self) -> int:
        return len(self._taxa)

    def __contains__(self, taxid: int) -> bool:
        return taxid in self._taxa

    def get_taxon(self, taxid: int) -> Taxon:
        try:
            return self._taxa[taxid]
        except KeyError:
            raise NotFoundError(f"No such ID: {taxid}") from None

    def get_taxid(self, name: str) -> int:
        try:
            return self._by_name[name]
        except KeyError:
            raise NotFoundError(f"No such name: {name}") from None

    def get_parent(self, taxid: int) -> int:
        return self.get_taxon(taxid).parent_taxid

    def get_children(self, taxid: int) -> List[int]:
        self.get_taxon(taxid)
        return list(self._children.get(taxid, []))
