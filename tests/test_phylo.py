"""Tests for the Bio.Phylo interop."""

from io import StringIO

import pytest
from Bio import Phylo

from fastax.collapse import Mode
from fastax.errors import TreeFormatError
from fastax.phylo import export, from_phylo, read_tree, to_phylo
from fastax.render import render_box_tree
from fastax.tree import make_tree

from tests.conftest import QUERY

LEAVES = [
    "Escherichia coli",
    "Saccharomyces cerevisiae",
    "Drosophila melanogaster",
    "Homo sapiens",
    "Mus musculus",
]


class TestToPhylo:
    """Test converting merged trees to Bio.Phylo trees."""

    def test_compact(self, store):
        """Should keep only the shown nodes."""
        tree = to_phylo(make_tree(store, QUERY).root, Mode.COMPACT)

        assert tree.rooted
        assert tree.root.name == "root"
        assert [clade.name for clade in tree.get_terminals()] == LEAVES
        assert len(list(tree.find_clades())) == 10

    def test_full(self, store):
        """Should keep every node in full mode."""
        merged = make_tree(store, QUERY)
        tree = to_phylo(merged.root, Mode.FULL, "%taxid")

        assert len(list(tree.find_clades())) == len(merged)
        assert tree.root.clades[0].name == "131567"

    def test_newick_round_trip(self, store):
        """Should write Newick that Bio.Phylo reads back."""
        text = export(make_tree(store, QUERY).root, "newick")
        tree = Phylo.read(StringIO(text), "newick")

        assert tree.count_terminals() == len(LEAVES)
        assert "Euarchontoglires" in text
        assert ":" not in text

    def test_phyloxml(self, store):
        """Should write phyloXML."""
        text = export(make_tree(store, QUERY).root, "phyloxml")
        assert "phyloxml" in text
        assert "<name>Homo sapiens</name>" in text

    def test_unknown_format(self, store):
        """Should refuse formats it cannot write."""
        with pytest.raises(ValueError):
            export(make_tree(store, QUERY).root, "svg")


class TestFromPhylo:
    """Test reading tree files into merged trees."""

    def test_preorder_ids(self):
        """Should number clades in preorder and keep their names."""
        tree = from_phylo(Phylo.read(StringIO("((A,B)AB,C)top;"), "newick"))

        assert tree.root.name == "top"
        assert [(node.taxid, node.name) for node in tree] == [
            (1, "top"), (2, "AB"), (3, "A"), (4, "B"), (5, "C"),
        ]
        assert tree.lca([3, 4]).name == "AB"

    def test_malformed(self, tmp_path):
        """Should raise TreeFormatError for unbalanced or empty files."""
        path = tmp_path / "tree.nwk"
        path.write_text("((A,B;\n")
        with pytest.raises(TreeFormatError):
            read_tree(str(path))

        path.write_text("")
        with pytest.raises(TreeFormatError):
            read_tree(str(path))

    def test_draw(self, tmp_path):
        """Should draw a Newick file, collapsing unary clades."""
        path = tmp_path / "tree.nwk"
        path.write_text("(((A,B)AB)X,C)top;\n")
        tree = read_tree(str(path))

        assert render_box_tree(tree.root, Mode.COMPACT, "%name") == (
            " ─┬─ top\n"
            "  ├─┬─ AB\n"
            "  │ ├── A\n"
            "  │ └── B\n"
            "  └── C"
        )
