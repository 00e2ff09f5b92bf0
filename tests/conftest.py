"""Shared fixtures: a slice of the NCBI Taxonomy around five model organisms."""

import zipfile
from pathlib import Path

import pytest

from fastax.lineage import MemoryStore
from fastax.node import SCIENTIFIC_NAME, Taxon

# (taxid, parent taxid, rank, scientific name)
TAXA = [
    (1, 1, "no rank", "root"),
    (131567, 1, "no rank", "cellular organisms"),
    # Escherichia coli
    (2, 131567, "superkingdom", "Bacteria"),
    (1224, 2, "phylum", "Proteobacteria"),
    (1236, 1224, "class", "Gammaproteobacteria"),
    (91347, 1236, "order", "Enterobacterales"),
    (543, 91347, "family", "Enterobacteriaceae"),
    (561, 543, "genus", "Escherichia"),
    (562, 561, "species", "Escherichia coli"),
    # Saccharomyces cerevisiae
    (2759, 131567, "superkingdom", "Eukaryota"),
    (33154, 2759, "clade", "Opisthokonta"),
    (4751, 33154, "kingdom", "Fungi"),
    (451864, 4751, "subkingdom", "Dikarya"),
    (4890, 451864, "phylum", "Ascomycota"),
    (716545, 4890, "clade", "saccharomyceta"),
    (147537, 716545, "subphylum", "Saccharomycotina"),
    (4891, 147537, "class", "Saccharomycetes"),
    (4892, 4891, "order", "Saccharomycetales"),
    (4893, 4892, "family", "Saccharomycetaceae"),
    (4930, 4893, "genus", "Saccharomyces"),
    (4932, 4930, "species", "Saccharomyces cerevisiae"),
    # Drosophila melanogaster
    (33208, 33154, "kingdom", "Metazoa"),
    (6072, 33208, "clade", "Eumetazoa"),
    (33213, 6072, "clade", "Bilateria"),
    (33317, 33213, "clade", "Protostomia"),
    (1206794, 33317, "clade", "Ecdysozoa"),
    (6656, 1206794, "phylum", "Arthropoda"),
    (6960, 6656, "subphylum", "Hexapoda"),
    (50557, 6960, "class", "Insecta"),
    (7147, 50557, "order", "Diptera"),
    (7214, 7147, "family", "Drosophilidae"),
    (7215, 7214, "genus", "Drosophila"),
    (7227, 7215, "species", "Drosophila melanogaster"),
    # Homo sapiens
    (33511, 33213, "clade", "Deuterostomia"),
    (7711, 33511, "phylum", "Chordata"),
    (7742, 7711, "clade", "Vertebrata"),
    (40674, 7742, "class", "Mammalia"),
    (9347, 40674, "clade", "Eutheria"),
    (314146, 9347, "superorder", "Euarchontoglires"),
    (9443, 314146, "order", "Primates"),
    (9604, 9443, "family", "Hominidae"),
    (9605, 9604, "genus", "Homo"),
    (9606, 9605, "species", "Homo sapiens"),
    # Mus musculus
    (314147, 314146, "clade", "Glires"),
    (9989, 314147, "order", "Rodentia"),
    (10066, 9989, "family", "Muridae"),
    (10088, 10066, "genus", "Mus"),
    (10090, 10088, "species", "Mus musculus"),
    (39442, 10090, "subspecies", "Mus musculus musculus"),
]

QUERY = [562, 4932, 7227, 9606, 10090]


def make_taxon(taxid, parent, rank, name, **extra):
    return Taxon(taxid=taxid, parent_taxid=parent, rank=rank, names={SCIENTIFIC_NAME: [name]}, **extra)


@pytest.fixture
def store() -> MemoryStore:
    """Provide an in-memory store holding TAXA."""
    return MemoryStore(make_taxon(*row) for row in TAXA)


# ----------------------------
# taxdmp.zip
# ----------------------------

def dmp_line(*fields) -> str:
    return "\t|\t".join(str(field) for field in fields) + "\t|\n"


@pytest.fixture
def taxdmp(tmp_path: Path) -> Path:
    """Build a small taxdmp.zip with the same content as TAXA."""
    divisions = dmp_line(0, "BCT", "Bacteria", "") + dmp_line(2, "MAM", "Mammals", "") \
        + dmp_line(8, "UNA", "Unassigned", "")
    gencode = dmp_line(0, "", "Unspecified", "", "") + dmp_line(1, "", "Standard", "", "") \
        + dmp_line(2, "", "Vertebrate Mitochondrial", "", "") \
        + dmp_line(11, "", "Bacterial, Archaeal and Plant Plastid", "", "")

    names = []
    nodes = []
    for taxid, parent, rank, name in TAXA:
        names.append(dmp_line(taxid, name, "", "scientific name"))
        if taxid == 562:
            division, code, mito, comment = 0, 11, 0, ""
        elif taxid == 1:
            division, code, mito, comment = 8, 1, 0, ""
        else:
            division, code, mito, comment = 2, 1, 2, ""
        if taxid == 9606:
            comment = "the human"
        nodes.append(dmp_line(
            taxid, parent, rank, "", division, 0, code, 0, mito, 0, 0, 0, comment,
        ))
    names.append(dmp_line(9606, "human", "", "genbank common name"))
    names.append(dmp_line(9606, "Homo sapiens Linnaeus, 1758", "", "authority"))
    names.append(dmp_line(9606, "man", "", "common name"))
    names.append(dmp_line(562, "Bacillus coli", "", "synonym"))

    path = tmp_path / "taxdmp.zip"
    with zipfile.ZipFile(path, "w") as archive:
        archive.writestr("division.dmp", divisions)
        archive.writestr("gencode.dmp", gencode)
        archive.writestr("names.dmp", "".join(names))
        archive.writestr("nodes.dmp", "".join(nodes))
        archive.writestr("readme.txt", "test dump\n")
    return path
