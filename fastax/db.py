"""SQLAlchemy models and read access for the local NCBI Taxonomy database.

The schema mirrors the files of the NCBI taxonomy dump (``taxdmp.zip``):
divisions, genetic codes, nodes and names. ``fastax.populate`` fills it;
``TaxonomyDB`` answers the lookups the lineage fetcher needs.
"""

import logging
from pathlib import Path
from typing import Dict, List

from sqlalchemy import Column, ForeignKey, Integer, String, create_engine, select
from sqlalchemy.orm import declarative_base, relationship, sessionmaker

from fastax.errors import NotFoundError
from fastax.node import SCIENTIFIC_NAME, Taxon

logger = logging.getLogger(__name__)

TaxonomyBase = declarative_base()

UNSPECIFIED_CODE = "Unspecified"


class Division(TaxonomyBase):
    """GenBank division (division.dmp)."""

    __tablename__ = "divisions"

    id = Column(Integer, primary_key=True)
    division = Column(String, nullable=False)  # e.g., "Primates"


class GeneticCode(TaxonomyBase):
    """Genetic code table (gencode.dmp)."""

    __tablename__ = "geneticCodes"

    id = Column(Integer, primary_key=True)
    name = Column(String, nullable=False)  # e.g., "Standard"


class TaxonNode(TaxonomyBase):
    """One taxon and its place in the hierarchy (nodes.dmp)."""

    __tablename__ = "nodes"

    tax_id = Column(Integer, primary_key=True)
    parent_tax_id = Column(Integer, nullable=False, index=True)  # the root is its own parent
    rank = Column(String, nullable=False)  # e.g., "species", "no rank"
    division_id = Column(Integer, ForeignKey("divisions.id"), nullable=False)
    genetic_code_id = Column(Integer, ForeignKey("geneticCodes.id"), nullable=False)
    mito_genetic_code_id = Column(Integer, ForeignKey("geneticCodes.id"), nullable=False)
    comment = Column(String, nullable=True)

    # Relationships
    division = relationship("Division")
    genetic_code = relationship("GeneticCode", foreign_keys=[genetic_code_id])
    mito_genetic_code = relationship("GeneticCode", foreign_keys=[mito_genetic_code_id])


class TaxonName(TaxonomyBase):
    """A name of a taxon, with its class (names.dmp)."""

    __tablename__ = "names"

    id = Column(Integer, primary_key=True, autoincrement=True)
    tax_id = Column(Integer, nullable=False, index=True)
    name = Column(String, nullable=False, index=True)  # e.g., "Homo sapiens"
    name_class = Column(String, nullable=False)  # e.g., "scientific name", "synonym"

    __table_args__ = ({"sqlite_autoincrement": True},)


class TaxonomyDB:
    """Taxonomy store over a populated SQLite database."""

    def __init__(self, db_path: Path):
        """Open the taxonomy database.

        Args:
            db_path: Path to the SQLite database built by ``fastax populate``
        """
        self.db_path = Path(db_path)
        if not self.db_path.exists():
            raise FileNotFoundError(f"Taxonomy database not found: {self.db_path}")

        self.engine = create_engine(f"sqlite:///{self.db_path}")
        self.session_local = sessionmaker(autoflush=False, bind=self.engine)
        logger.debug("Database %s opened.", self.db_path)

    def close(self) -> None:
        self.engine.dispose()

    def __enter__(self) -> "TaxonomyDB":
        return self

    def __exit__(self, *exc_info) -> None:
        self.close()

    def get_taxon(self, taxid: int) -> Taxon:
        """Get a taxon with all its names and metadata.

        Raises:
            NotFoundError: if no node has this taxid
        """
        with self.session_local() as session:
            node = session.get(TaxonNode, taxid)
            if node is None:
                raise NotFoundError(f"No such ID: {taxid}")

            names: Dict[str, List[str]] = {}
            stmt = (
                select(TaxonName.name_class, TaxonName.name)
                .where(TaxonName.tax_id == taxid)
                .order_by(TaxonName.id)
            )
            for name_class, name in session.execute(stmt):
                names.setdefault(name_class, []).append(name)

            mito = node.mito_genetic_code.name if node.mito_genetic_code else None
            return Taxon(
                taxid=node.tax_id,
                parent_taxid=node.parent_tax_id,
                rank=node.rank,
                names=names,
                division=node.division.division if node.division else "",
                genetic_code=node.genetic_code.name if node.genetic_code else "",
                mito_genetic_code=None if mito == UNSPECIFIED_CODE else mito,
                comments=node.comment or None,
            )

    def get_taxid(self, name: str) -> int:
        """Get the taxid of an exact scientific name.

        Raises:
            NotFoundError: if no taxon has this scientific name
        """
        with self.session_local() as session:
            stmt = (
                select(TaxonName.tax_id)
                .where(TaxonName.name == name, TaxonName.name_class == SCIENTIFIC_NAME)
                .order_by(TaxonName.tax_id)
                .limit(1)
            )
            taxid = session.execute(stmt).scalar()
        if taxid is None:
            raise NotFoundError(f"No such name: {name}")
        return taxid

    def get_parent(self, taxid: int) -> int:
        with self.session_local() as session:
            stmt = select(TaxonNode.parent_tax_id).where(TaxonNode.tax_id == taxid)
            parent = session.execute(stmt).scalar()
        if parent is None:
            raise NotFoundError(f"No such ID: {taxid}")
        return parent

    def get_children(self, taxid: int) -> List[int]:
        """Get the taxids of the immediate children of a taxon, ascending."""
        with self.session_local() as session:
            stmt = (
                select(TaxonNode.tax_id)
                .where(TaxonNode.parent_tax_id == taxid, TaxonNode.tax_id != taxid)
                .order_by(TaxonNode.tax_id)
            )
            children = list(session.execute(stmt).scalars())
        if not children:
            # tell a tip apart from an unknown taxid
            self.get_parent(taxid)
        return children
