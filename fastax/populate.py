"""Load a local copy of the NCBI taxonomy dump into SQLite.

The archive is ``taxdmp.zip`` as published under
``ftp.ncbi.nih.gov/pub/taxonomy``. Its ``.dmp`` files use ``\\t|\\t`` between
fields and end every line with ``\\t|``.
"""

import io
import logging
import zipfile
from collections.abc import Iterable, Iterator
from pathlib import Path
from typing import Any, Dict, List

from sqlalchemy import create_engine, text
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session, sessionmaker

from fastax.db import Division, GeneticCode, TaxonName, TaxonNode, TaxonomyBase
from fastax.errors import DumpFormatError

logger = logging.getLogger(__name__)

BATCH_SIZE = 10000
DUMP_FILES = ("division.dmp", "gencode.dmp", "names.dmp", "nodes.dmp")


def parse_dmp_line(line: str) -> List[str]:
    """Split one ``.dmp`` line into stripped fields."""
    line = line.rstrip("\r\n")
    if line.endswith("\t|"):
        line = line[:-2]
    return [field.strip() for field in line.split("\t|\t")]


def read_dmp(archive: zipfile.ZipFile, member: str) -> Iterator[List[str]]:
    with archive.open(member) as raw:
        for line in io.TextIOWrapper(raw, encoding="utf-8", errors="replace"):
            if line.strip():
                yield parse_dmp_line(line)


def _divisions(records: Iterable[List[str]]) -> Iterator[Dict[str, Any]]:
    for record in records:
        yield {"id": int(record[0]), "division": record[2]}


def _genetic_codes(records: Iterable[List[str]]) -> Iterator[Dict[str, Any]]:
    for record in records:
        yield {"id": int(record[0]), "name": record[2]}


def _names(records: Iterable[List[str]]) -> Iterator[Dict[str, Any]]:
    for record in records:
        yield {"tax_id": int(record[0]), "name": record[1], "name_class": record[3]}


def _nodes(records: Iterable[List[str]]) -> Iterator[Dict[str, Any]]:
    for record in records:
        yield {
            "tax_id": int(record[0]),
            "parent_tax_id": int(record[1]),
            "rank": record[2],
            "division_id": int(record[4]),
            "genetic_code_id": int(record[6]),
            "mito_genetic_code_id": int(record[8]),
            "comment": record[12] if len(record) > 12 else "",
        }


def _load(session: Session, model, mappings: Iterable[Dict[str, Any]]) -> int:
    """Insert mappings in batches of ``BATCH_SIZE``; return how many were inserted."""
    batch = []
    count = 0
    for mapping in mappings:
        batch.append(mapping)
        count += 1
        if len(batch) >= BATCH_SIZE:
            session.bulk_insert_mappings(model, batch)
            session.commit()
            batch = []
            logger.debug("Read %d %s records so far.", count, model.__tablename__)

    if batch:
        session.bulk_insert_mappings(model, batch)
        session.commit()
    logger.debug("Done inserting %s.", model.__tablename__)
    return count


def _open_archive(taxdmp: Path) -> zipfile.ZipFile:
    if not taxdmp.exists():
        raise FileNotFoundError(f"Taxonomy dump not found: {taxdmp}")
    try:
        archive = zipfile.ZipFile(taxdmp)
    except zipfile.BadZipFile as e:
        raise DumpFormatError(f"{taxdmp} is not a zip archive") from e

    missing = [member for member in DUMP_FILES if member not in archive.namelist()]
    if missing:
        archive.close()
        raise FileNotFoundError(f"{taxdmp} lacks {', '.join(missing)}")
    return archive


def _fill(db_path: Path, archive: zipfile.ZipFile) -> Dict[str, int]:
    engine = create_engine(f"sqlite:///{db_path}")
    TaxonomyBase.metadata.create_all(engine)
    logger.info("Initialized database %s.", db_path)
    session_local = sessionmaker(autoflush=False, bind=engine)

    counts = {}
    try:
        with session_local() as session:
            # Optimize SQLite for bulk insert
            session.execute(text("PRAGMA synchronous = OFF"))
            session.execute(text("PRAGMA temp_store = MEMORY"))

            logger.info("Loading dumps into local database. This may take some time.")
            counts["divisions"] = _load(session, Division, _divisions(read_dmp(archive, "division.dmp")))
            counts["geneticCodes"] = _load(
                session, GeneticCode, _genetic_codes(read_dmp(archive, "gencode.dmp"))
            )
            counts["names"] = _load(session, TaxonName, _names(read_dmp(archive, "names.dmp")))
            counts["nodes"] = _load(session, TaxonNode, _nodes(read_dmp(archive, "nodes.dmp")))

            session.execute(text("PRAGMA synchronous = NORMAL"))
    finally:
        engine.dispose()
    return counts


def populate(db_path: Path, taxdmp: Path) -> Dict[str, int]:
    """(Re)create the taxonomy database from a ``taxdmp.zip`` archive.

    The dumps are loaded into a scratch file next to ``db_path``, which only
    replaces the existing database once every table is loaded.

    Args:
        db_path: Path of the SQLite database to (re)create
        taxdmp: Path to the NCBI ``taxdmp.zip`` archive

    Returns:
        Number of rows inserted per table

    Raises:
        FileNotFoundError: The archive or one of its dump files is missing
        DumpFormatError: The archive is not a zip file or holds malformed rows
    """
    db_path = Path(db_path)
    taxdmp = Path(taxdmp)
    db_path.parent.mkdir(parents=True, exist_ok=True)
    scratch = db_path.with_name(db_path.name + ".tmp")
    scratch.unlink(missing_ok=True)

    with _open_archive(taxdmp) as archive:
        try:
            counts = _fill(scratch, archive)
        except (ValueError, IndexError, IntegrityError, zipfile.BadZipFile) as e:
            scratch.unlink(missing_ok=True)
            raise DumpFormatError(f"Malformed taxonomy dump {taxdmp}: {e}") from e
        except Exception:
            scratch.unlink(missing_ok=True)
            raise

    scratch.replace(db_path)
    logger.info(
        "Database populated: %d nodes, %d names", counts.get("nodes", 0), counts.get("names", 0)
    )
    return counts
