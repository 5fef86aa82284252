"""Pytest fixtures: small NCBI taxonomy dumps written to tmp_path."""
from pathlib import Path

import pytest

from ncbitaxonomy import NcbiDbTaxonomy, NcbiFileTaxonomy, export_taxonomy

# (tax_id, parent tax_id, rank, scientific name)
HOMINID_TAXA = [
    (1, 1, "no rank", "root"),
    (131567, 1, "no rank", "cellular organisms"),
    (2759, 131567, "superkingdom", "Eukaryota"),
    (33208, 2759, "kingdom", "Metazoa"),
    (7711, 33208, "phylum", "Chordata"),
    (40674, 7711, "class", "Mammalia"),
    (9443, 40674, "order", "Primates"),
    (9604, 9443, "family", "Hominidae"),
    (207598, 9604, "subfamily", "Homininae"),
    (9605, 207598, "genus", "Homo"),
    (9606, 9605, "species", "Homo sapiens"),
    (9596, 207598, "genus", "Pan"),
    (9598, 9596, "species", "Pan troglodytes"),
    (2, 131567, "superkingdom", "Bacteria"),
    (562, 2, "species", "Escherichia coli"),
    (10239, 1, "superkingdom", "Viruses"),
    # 4999 is only ever referenced as a parent: it has no row, name or rank
    (5000, 4999, "species", "Orphanus solitarius"),
]


def dump_line(*fields):
    return "\t|\t".join(str(f) for f in fields) + "\t|\n"


def write_dump(directory: Path, taxa, prefix="", reverse=True, extra_names=()):
    """
    Write nodes.dmp and names.dmp for `taxa`.

    Rows are written in reverse order by default so that children come
    before their parents.
    """
    directory.mkdir(parents=True, exist_ok=True)
    rows = list(reversed(taxa)) if reverse else list(taxa)
    with open(directory / f"{prefix}nodes.dmp", "w") as nodes:
        for tax_id, parent_id, rank, _ in rows:
            nodes.write(dump_line(tax_id, parent_id, rank, "", 0, 0, 1, 0, 1, 0, 0, 0, ""))
    with open(directory / f"{prefix}names.dmp", "w") as names:
        for tax_id, _, _, name in rows:
            names.write(dump_line(tax_id, name, "", "scientific name"))
            names.write(dump_line(tax_id, f"{name} (synonym)", "", "synonym"))
        for line in extra_names:
            names.write(line)
    return directory


def phage_taxa():
    """
    Taxa of a viral tree where 12333 ("unclassified bacterial viruses") heads
    a subtree of exactly 500 nodes:

        12333
        ├── 700001..700007 (7 groups, 70 generated phages each)
        │   └── 504556 Propionibacterium phage PAS7 (under 700001)
        └── 370556 Streptococcus phage 9429.1
    """
    taxa = [
        (1, 1, "no rank", "root"),
        (10239, 1, "superkingdom", "Viruses"),
        (186616, 10239, "no rank", "environmental samples"),
        (12333, 10239, "no rank", "unclassified bacterial viruses"),
        (370556, 12333, "species", "Streptococcus phage 9429.1"),
    ]
    next_id = 800000
    for group in range(1, 8):
        group_id = 700000 + group
        taxa.append((group_id, 12333, "no rank", f"phage group {group}"))
        for _ in range(70):
            taxa.append((next_id, group_id, "species", f"Synthetic phage {next_id}"))
            next_id += 1
    taxa.append((504556, 700001, "species", "Propionibacterium phage PAS7"))
    return taxa


@pytest.fixture
def hominid_dump(tmp_path):
    return write_dump(tmp_path / "hominid", HOMINID_TAXA)


@pytest.fixture
def phage_dump(tmp_path):
    return write_dump(tmp_path / "phage", phage_taxa())


@pytest.fixture
def hominid_taxonomy(hominid_dump):
    return NcbiFileTaxonomy.from_directory(hominid_dump)


@pytest.fixture
def phage_taxonomy(phage_dump):
    return NcbiFileTaxonomy.from_directory(phage_dump)


@pytest.fixture
def hominid_db_url(tmp_path, hominid_taxonomy):
    db_url = f"sqlite:///{tmp_path / 'hominid.sqlite'}"
    export_taxonomy(hominid_taxonomy, db_url)
    return db_url


@pytest.fixture
def hominid_db_taxonomy(hominid_db_url):
    with NcbiDbTaxonomy(hominid_db_url) as taxonomy:
        yield taxonomy


@pytest.fixture
def phage_db_taxonomy(tmp_path, phage_taxonomy):
    db_url = f"sqlite:///{tmp_path / 'phage.sqlite'}"
    export_taxonomy(phage_taxonomy, db_url)
    with NcbiDbTaxonomy(db_url) as taxonomy:
        yield taxonomy


@pytest.fixture(params=["file", "db"])
def hominid_backend(request, hominid_taxonomy):
    """The hominid taxonomy from each backend in turn."""
    if request.param == "file":
        return hominid_taxonomy
    return request.getfixturevalue("hominid_db_taxonomy")
