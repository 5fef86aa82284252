#!/usr/bin/env python3
"""
taxonomy_util: utilities for working with the NCBI taxonomy database.

Queries go to the taxonomy database (-d/--db, TAXONOMY_DB_URL or DATABASE_URL)
unless --taxonomy_dir points at a directory holding nodes.dmp and names.dmp.

    taxonomy_util to_db /data/ncbi_taxonomy
    taxonomy_util get_id "Homo sapiens"
    taxonomy_util get_lineage --show_names "Homo sapiens"
    taxonomy_util common_ancestor_distance --only_canonical "Homo sapiens" "Pan troglodytes"
"""

import argparse
import logging
import sys

from sqlalchemy.exc import SQLAlchemyError

from . import __version__
from .backend import open_taxonomy
from .config import get_db_url
from .errors import TaxonomyError
from .export import export_taxonomy
from .file_taxonomy import NcbiFileTaxonomy

logger = logging.getLogger(__name__)


def build_parser():
    parser = argparse.ArgumentParser(prog="taxonomy_util",
                                     description="Utilities for working with the NCBI taxonomy database")
    parser.add_argument("--version", action="version", version=f"%(prog)s {__version__}")
    parser.add_argument("-d", "--db", dest="db_url", default=None,
                        help="URL for the taxonomy database (default: $TAXONOMY_DB_URL, $DATABASE_URL "
                             "or sqlite:///taxonomy.sqlite)")
    parser.add_argument("--taxonomy_dir", default=None,
                        help="Query nodes.dmp and names.dmp in this directory instead of the database")
    parser.add_argument("-t", "--tax_prefix", default="",
                        help="String to prepend to names of nodes.dmp and names.dmp")
    parser.add_argument("--verbose", action="store_true", help="Debug logging")
    sub = parser.add_subparsers(dest="cmd", required=True)

    distance = sub.add_parser("common_ancestor_distance",
                              help="find the tree distance to the common ancestor between two taxa")
    distance.add_argument("--only_canonical", action="store_true",
                          help="Only consider canonical taxonomic ranks")
    distance.add_argument("name1", metavar="NAME1", help="Name of first taxon")
    distance.add_argument("name2", metavar="NAME2", help="Name of second taxon")

    get_id = sub.add_parser("get_id", help="find taxonomy ID for name")
    get_id.add_argument("name", metavar="NAME", help="Name of taxon")

    get_name = sub.add_parser("get_name", help="find name for taxonomy ID")
    get_name.add_argument("taxon_id", metavar="ID", type=int, help="Taxonomy ID to look up")

    lineage = sub.add_parser("get_lineage", help="get lineage for name")
    lineage.add_argument("-S", "--show_names", action="store_true", help="Show taxon names, not just IDs")
    lineage.add_argument("-D", "--delimiter", default=";", help="Delimiter for lineage string")
    lineage.add_argument("name", metavar="NAME", help="Name of taxon")

    to_db = sub.add_parser("to_db", aliases=["to_sqlite"],
                           help="save taxonomy database loaded from files to the taxonomy database")
    # also accepted after the subcommand; SUPPRESS keeps a global -t value
    to_db.add_argument("-t", "--tax_prefix", default=argparse.SUPPRESS,
                       help="String to prepend to names of nodes.dmp and names.dmp")
    to_db.add_argument("--replace", action="store_true", help="Delete rows already in the taxonomy table")
    to_db.add_argument("dump_dir", metavar="TAXONOMY_DIR",
                       help="Directory containing the NCBI taxonomy nodes.dmp and names.dmp files")
    return parser


def common_ancestor_distance(taxonomy, args):
    found = taxonomy.common_ancestor(args.name1, args.name2, args.only_canonical)
    if found is None:
        print("no common ancestor found", file=sys.stderr)
        return 1
    distance, ancestor_name = found
    print(f"{distance}\t{ancestor_name}")
    return 0


def get_id(taxonomy, args):
    taxon_id = taxonomy.id_by_name(args.name)
    if taxon_id is None:
        print(f"name {args.name} not found in taxonomy", file=sys.stderr)
        return 1
    print(taxon_id)
    return 0


def get_name(taxonomy, args):
    name = taxonomy.name_by_id(args.taxon_id)
    if name is None:
        print(f"id {args.taxon_id} not found in taxonomy", file=sys.stderr)
        return 1
    print(name)
    return 0


def get_lineage(taxonomy, args):
    lineage = taxonomy.lineage_by_name(args.name)
    if lineage is None:
        print(f"{args.name} not found in taxonomy", file=sys.stderr)
        return 1
    if args.show_names:
        output = []
        for taxon_id in lineage:
            name = taxonomy.name_by_id(taxon_id)
            output.append(str(taxon_id) if name is None else f"{name} ({taxon_id})")
    else:
        output = [str(taxon_id) for taxon_id in lineage]
    print(args.delimiter.join(output))
    return 0


QUERY_COMMANDS = {
    "common_ancestor_distance": common_ancestor_distance,
    "get_id": get_id,
    "get_name": get_name,
    "get_lineage": get_lineage,
}


def to_db(args):
    db_url = get_db_url(args.db_url)
    logger.info("loading taxonomy")
    taxonomy = NcbiFileTaxonomy.from_directory(args.dump_dir, args.tax_prefix, show_progress=args.verbose)
    logger.info("taxonomy loaded")
    export_taxonomy(taxonomy, db_url, replace_existing=args.replace, show_progress=args.verbose)
    return 0


def main(argv=None):
    args = build_parser().parse_args(argv)
    logging.basicConfig(level=logging.DEBUG if args.verbose else logging.INFO,
                        format='%(asctime)s - %(levelname)s - %(message)s')

    try:
        if args.cmd in ("to_db", "to_sqlite"):
            return to_db(args)
        taxonomy = open_taxonomy(args.db_url, args.taxonomy_dir, args.tax_prefix)
        try:
            return QUERY_COMMANDS[args.cmd](taxonomy, args)
        finally:
            if hasattr(taxonomy, "close"):
                taxonomy.close()
    except (TaxonomyError, SQLAlchemyError) as e:
        logger.error(f"An error occurred: {e}")
        return 2


if __name__ == "__main__":
    sys.exit(main())
