"""
fastax command line.

Explore the NCBI Taxonomy from a local copy: describe taxa, print their
lineages, merge them into a tree, list a subtree or find common ancestors.
"""

from __future__ import annotations

import argparse
import logging
import sys
from itertools import combinations
from typing import AbstractSet, List, Optional, TextIO

from fastax import __version__, config
from fastax.collapse import Mode
from fastax.db import TaxonomyDB
from fastax.errors import EmptySetError, FastaxError
from fastax.labels import BOX_FORMAT, COMPACT_FORMAT
from fastax.lineage import fetch_lineages, resolve_terms
from fastax.node import Node
from fastax.phylo import EXPORT_FORMATS, export, read_tree
from fastax.populate import populate
from fastax.render import render_box_tree, render_compact, render_lineage
from fastax.report import describe, write_lcas, write_lineages_csv, write_taxa_csv
from fastax.tree import make_subtree, make_tree

logger = logging.getLogger("fastax")

FORMAT_HELP = (
    "Format the nodes with this formatting string (%%rank is replaced by the rank, "
    "%%name by the scientific name and %%taxid by the NCBI taxonomy ID)"
)


# ----------------------------
# Output helpers
# ----------------------------

def show_tree(
    root: Node,
    out: TextIO,
    internal: bool = False,
    newick: bool = False,
    format_spec: Optional[str] = None,
    export_format: Optional[str] = None,
    keep: AbstractSet[int] = frozenset(),
) -> None:
    """
    Write a merged tree as a box tree, in the compact dialect (``newick``)
    or in a standard tree format (``export_format``).

    Unless ``internal`` is set, nodes with a single child are not shown.
    """
    mode = Mode.FULL if internal else Mode.COMPACT
    if export_format:
        text = export(root, export_format, mode, format_spec or COMPACT_FORMAT, keep)
    elif newick:
        # the box tree default is not really useful in this format
        text = render_compact(root, mode, format_spec or COMPACT_FORMAT, keep)
    else:
        text = render_box_tree(root, mode, format_spec or BOX_FORMAT, keep)
    out.write(text + "\n")


def _add_tree_options(p: argparse.ArgumentParser) -> None:
    p.add_argument("-i", "--internal", action="store_true",
                   help="Show all internal nodes, including those with a single child")
    p.add_argument("-n", "--newick", action="store_true",
                   help="Print the tree in the compact parenthesized format")
    p.add_argument("-f", "--format", dest="format_spec", default=None, help=FORMAT_HELP)
    p.add_argument("--export", choices=EXPORT_FORMATS, default=None,
                   help="Write the tree in a standard tree format instead")


def build_parser() -> argparse.ArgumentParser:
    p = argparse.ArgumentParser(
        prog="fastax",
        description="Explore the NCBI Taxonomy database from a local copy.",
    )
    p.add_argument("--version", action="version", version=f"%(prog)s {__version__}")
    p.add_argument("-v", "--verbose", action="store_true", help="Be verbose")
    p.add_argument("-d", "--debug", action="store_true", help="Be extremely verbose")
    p.add_argument("--db", default=None,
                   help=f"Path to the taxonomy database (default: ${config.DB_ENV} "
                        f"or the fastax data directory)")
    sub = p.add_subparsers(dest="command", metavar="COMMAND")
    sub.required = True

    show = sub.add_parser("show", help="Look up taxa and describe them; exact matches only")
    show.add_argument("terms", nargs="+", help="NCBI Taxonomy ID(s) or scientific name(s)")
    show.add_argument("-c", "--csv", action="store_true", help="Output the results as CSV")

    lineage = sub.add_parser("lineage", help="Output the lineage of the taxa, up to the root")
    lineage.add_argument("terms", nargs="+", help="NCBI Taxonomy ID(s) or scientific name(s)")
    lineage.add_argument("-r", "--ranks", action="store_true",
                         help="Keep only the nodes that have a named rank")
    lineage.add_argument("-c", "--csv", action="store_true",
                         help="Output the results as CSV; each cell is rank:scientific name:taxid")
    lineage.add_argument("-f", "--format", dest="format_spec", default=None, help=FORMAT_HELP)

    tree = sub.add_parser("tree", help="Make a tree from the root to all given taxa")
    tree.add_argument("terms", nargs="+", help="NCBI Taxonomy ID(s) or scientific name(s)")
    _add_tree_options(tree)

    subtree = sub.add_parser("subtree", help="Make a tree with the given taxon as root")
    subtree.add_argument("term", help="NCBI Taxonomy ID or scientific name")
    subtree.add_argument("-s", "--species", action="store_true",
                         help="Stop at species instead of tips (can be subspecies)")
    _add_tree_options(subtree)

    lca = sub.add_parser("lca", help="Find the lowest common ancestor of each pair of taxa")
    lca.add_argument("terms", nargs="+", help="NCBI Taxonomy IDs or scientific names")
    mode = lca.add_mutually_exclusive_group()
    mode.add_argument("-c", "--csv", action="store_true",
                      help="Print the results in CSV; the first row contains the headers")
    mode.add_argument("-a", "--all", dest="all_taxa", action="store_true",
                      help="Print the single common ancestor of all the taxa")

    pop = sub.add_parser("populate", help="(Re)populate the local database from a taxdmp.zip")
    pop.add_argument("taxdmp", help="Path to a copy of ftp.ncbi.nih.gov/pub/taxonomy/taxdmp.zip")

    draw = sub.add_parser("draw", help="Draw a tree file with box-drawing characters")
    draw.add_argument("path", help="Path to the tree file")
    draw.add_argument("--input-format", default="newick", choices=EXPORT_FORMATS,
                      help="Format of the tree file (default: newick)")
    draw.add_argument("-i", "--internal", "--no-collapse-unary", dest="internal",
                      action="store_true", help="Do not collapse unary internal nodes")
    draw.add_argument("-f", "--format", dest="format_spec", default="%name", help=FORMAT_HELP)
    return p


def setup_logging(verbose: bool, debug: bool) -> None:
    level = logging.DEBUG if debug else logging.INFO if verbose else logging.WARNING
    logging.basicConfig(level=level, format="%(levelname)s: %(message)s")


# ----------------------------
# Commands
# ----------------------------

def run(args: argparse.Namespace, out: TextIO) -> None:
    if args.command == "populate":
        target = config.db_path(args.db)
        logger.info("Populating %s from %s", target, args.taxdmp)
        populate(target, args.taxdmp)
        logger.info("C'est fini !")
        return

    if args.command == "draw":
        tree = read_tree(args.path, args.input_format)
        show_tree(tree.root, out, internal=args.internal, format_spec=args.format_spec)
        return

    with TaxonomyDB(config.db_path(args.db)) as db:
        if args.command == "show":
            taxa = [db.get_taxon(taxid) for taxid in resolve_terms(db, args.terms)]
            if args.csv:
                write_taxa_csv(taxa, out)
            else:
                for taxon in taxa:
                    out.write(describe(taxon) + "\n")

        elif args.command == "lineage":
            lineages = fetch_lineages(db, resolve_terms(db, args.terms))
            if args.csv:
                write_lineages_csv(lineages, out, args.ranks)
            else:
                for path in lineages:
                    out.write(render_lineage(path, args.format_spec or BOX_FORMAT, args.ranks) + "\n")

        elif args.command in ("tree", "subtree"):
            if args.command == "tree":
                taxids = resolve_terms(db, args.terms)
                tree = make_tree(db, taxids)
                keep = frozenset(taxids)
            else:
                taxid, = resolve_terms(db, [args.term])
                tree = make_subtree(db, taxid, args.species)
                keep = frozenset()
            show_tree(tree.root, out, args.internal, args.newick, args.format_spec, args.export, keep)

        elif args.command == "lca":
            taxids = resolve_terms(db, args.terms)
            tree = make_tree(db, taxids)
            if args.all_taxa:
                common = tree.lca(taxids)
                names = ", ".join(tree.find(taxid).name for taxid in taxids)
                out.write(f"LCA({names}) = {common.name}\n")
            else:
                if len(taxids) < 2:
                    raise EmptySetError("The lca command needs at least two taxa.")
                lcas = [
                    (tree.find(a), tree.find(b), tree.lca([a, b]))
                    for a, b in combinations(taxids, 2)
                ]
                write_lcas(lcas, out, args.csv)


def main(argv: Optional[List[str]] = None) -> int:
    args = build_parser().parse_args(argv)
    setup_logging(args.verbose, args.debug)
    try:
        run(args, sys.stdout)
    except FileNotFoundError as e:
        logger.error("%s", e)
        if args.command not in ("populate", "draw"):
            logger.error("The database is probably not initialized.\n"
                         "Try running: 'fastax populate <taxdmp.zip>'")
        return 1
    except FastaxError as e:
        logger.error("%s", e)
        return 1
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
