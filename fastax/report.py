"""Human-readable and CSV reports for taxa, lineages and common ancestors."""

from __future__ import annotations

import csv
from typing import Iterable, List, Sequence, TextIO, Tuple

from fastax.node import NO_RANK, SCIENTIFIC_NAME, Taxon


TAXON_HEADER = [
    "taxid", "scientific_name", "rank", "division", "genetic_code", "mitochondrial_genetic_code",
]
LCA_HEADER = ["name1", "taxid1", "name2", "taxid2", "lca_name", "lca_taxid"]


def describe(taxon: Taxon) -> str:
    """Describe a taxon over several lines: names, division and genetic codes."""
    title = f"{taxon.name} - {taxon.rank}"
    lines = [title, "-" * len(title), f"NCBI Taxonomy ID: {taxon.taxid}"]

    def bullets(heading: str, name_class: str) -> None:
        if name_class in taxon.names:
            lines.append(heading)
            lines.extend(f"* {name}" for name in taxon.names[name_class])

    bullets("Same as:", "synonym")
    if "genbank common name" in taxon.names:
        lines.append(f"Commonly named {taxon.names['genbank common name'][0]}.")
    bullets("Also known as:", "common name")
    bullets("First description:", "authority")

    lines.append(f"Part of the {taxon.division}.")
    lines.append(f"Uses the {taxon.genetic_code} genetic code.")
    if taxon.mito_genetic_code:
        lines.append(f"Its mitochondria use the {taxon.mito_genetic_code} genetic code.")
    if taxon.comments:
        lines.append("")
        lines.append(f"Comments: {taxon.comments}")
    return "\n".join(lines)


def write_taxa_csv(taxa: Iterable[Taxon], out: TextIO) -> None:
    writer = csv.writer(out, lineterminator="\n")
    writer.writerow(TAXON_HEADER)
    for taxon in taxa:
        writer.writerow([
            taxon.taxid,
            taxon.names.get(SCIENTIFIC_NAME, [""])[0],
            taxon.rank,
            taxon.division,
            taxon.genetic_code,
            taxon.mito_genetic_code or "",
        ])


def lineage_cells(path: Sequence, ranks_only: bool = False) -> List[str]:
    """One ``rank:name:taxid`` cell per node of a lineage."""
    return [
        f"{record.rank}:{record.name}:{record.taxid}"
        for record in path
        if not ranks_only or record.rank != NO_RANK
    ]


def write_lineages_csv(paths: Iterable[Sequence], out: TextIO, ranks_only: bool = False) -> None:
    # rows have as many columns as their lineage has nodes
    writer = csv.writer(out, lineterminator="\n")
    for path in paths:
        writer.writerow(lineage_cells(path, ranks_only))


def write_lcas(lcas: Iterable[Tuple], out: TextIO, as_csv: bool = False) -> None:
    """Write ``(node1, node2, lca)`` triples, as text or as CSV with a header."""
    writer = csv.writer(out, lineterminator="\n")
    if as_csv:
        writer.writerow(LCA_HEADER)
    for first, second, common in lcas:
        if as_csv:
            writer.writerow([
                first.name, first.taxid, second.name, second.taxid, common.name, common.taxid,
            ])
        else:
            out.write(f"LCA({first.name}, {second.name}) = {common.name}\n")
