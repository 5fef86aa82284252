"""The file and database backends must answer every query the same way."""
import itertools

import pytest

from ncbitaxonomy import NcbiDbTaxonomy, NcbiFileTaxonomy, open_taxonomy
from tests.conftest import HOMINID_TAXA

UNCLASSIFIED_BACTERIAL_VIRUSES = 12333


@pytest.mark.parametrize("backend", ["phage_taxonomy", "phage_db_taxonomy"])
def test_phage_subtree(request, backend):
    taxonomy = request.getfixturevalue(backend)
    assert taxonomy.is_descendant_by_id(504556, UNCLASSIFIED_BACTERIAL_VIRUSES)
    assert taxonomy.is_descendant_by_id(370556, UNCLASSIFIED_BACTERIAL_VIRUSES)
    assert not taxonomy.is_descendant_by_id(186616, UNCLASSIFIED_BACTERIAL_VIRUSES)
    assert taxonomy.name_by_id(370556) == "Streptococcus phage 9429.1"
    assert taxonomy.id_by_name("Propionibacterium phage PAS7") == 504556
    assert not taxonomy.contains_id(999999999)
    assert taxonomy.distance_to_common_ancestor_by_id(504556, 370556) == 1


def test_phage_traversal(phage_taxonomy):
    subtree = list(phage_taxonomy.traversal(UNCLASSIFIED_BACTERIAL_VIRUSES))
    assert len(subtree) == 500
    assert len(set(subtree)) == 500
    assert 504556 in subtree
    assert 186616 not in subtree


def test_phage_descendants_match_traversal(phage_taxonomy, phage_db_taxonomy):
    subtree = set(phage_taxonomy.traversal(UNCLASSIFIED_BACTERIAL_VIRUSES))
    subtree.discard(UNCLASSIFIED_BACTERIAL_VIRUSES)
    for taxon_id in phage_taxonomy.taxon_ids():
        expected = taxon_id in subtree
        assert phage_taxonomy.is_descendant_by_id(taxon_id, UNCLASSIFIED_BACTERIAL_VIRUSES) == expected
        assert phage_db_taxonomy.is_descendant_by_id(taxon_id, UNCLASSIFIED_BACTERIAL_VIRUSES) == expected


def test_exported_database_agrees_with_files(hominid_taxonomy, hominid_db_taxonomy):
    tax_ids = [tax_id for tax_id, _, _, _ in HOMINID_TAXA] + [4999]
    for tax_id in tax_ids:
        assert hominid_db_taxonomy.name_by_id(tax_id) == hominid_taxonomy.name_by_id(tax_id)
        assert hominid_db_taxonomy.rank_by_id(tax_id) == hominid_taxonomy.rank_by_id(tax_id)
        assert hominid_db_taxonomy.lineage(tax_id) == hominid_taxonomy.lineage(tax_id)
    for a, b in itertools.product(tax_ids, repeat=2):
        assert hominid_db_taxonomy.is_descendant_by_id(a, b) == hominid_taxonomy.is_descendant_by_id(a, b), (a, b)
        for only_canonical in (False, True):
            assert (hominid_db_taxonomy.common_ancestor_by_id(a, b, only_canonical)
                    == hominid_taxonomy.common_ancestor_by_id(a, b, only_canonical)), (a, b, only_canonical)


def test_open_taxonomy_from_directory(hominid_dump):
    taxonomy = open_taxonomy(taxonomy_dir=hominid_dump)
    assert isinstance(taxonomy, NcbiFileTaxonomy)
    assert taxonomy.id_by_name("Homo") == 9605


def test_open_taxonomy_from_database(hominid_db_url):
    taxonomy = open_taxonomy(db_url=hominid_db_url)
    try:
        assert isinstance(taxonomy, NcbiDbTaxonomy)
        assert taxonomy.id_by_name("Homo") == 9605
    finally:
        taxonomy.close()


def test_open_taxonomy_from_environment(monkeypatch, hominid_db_url):
    monkeypatch.setenv("TAXONOMY_DB_URL", hominid_db_url)
    with open_taxonomy() as taxonomy:
        assert taxonomy.contains_name("Pan troglodytes")
