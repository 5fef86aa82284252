"""
In-memory taxonomy built straight from nodes.dmp and names.dmp.

Loading reads both files once, builds the arena forest and four lookup maps
(id -> node, name -> node, id -> rank, id -> name). Nothing is modified after
loading, so one instance can be shared by threads that only query it.
"""

import logging
from typing import Dict, Iterator, List, Optional, Tuple

from .config import dump_paths
from .dump_parser import collect_edges, read_nodes, read_scientific_names
from .errors import TaxonomyIntegrityError
from .forest import TaxonomyForest, build_forest
from .taxonomy import NcbiTaxonomy

logger = logging.getLogger(__name__)


class NcbiFileTaxonomy(NcbiTaxonomy):

    def __init__(self, forest: TaxonomyForest, id_to_node: Dict[int, int],
                 id_to_rank: Dict[int, Optional[str]], id_to_name: Dict[int, str],
                 name_to_node: Dict[str, int]):
        self._forest = forest
        self._id_to_node = id_to_node
        self._id_to_rank = id_to_rank
        self._id_to_name = id_to_name
        self._name_to_node = name_to_node

    @classmethod
    def from_ncbi_files(cls, nodes_filename, names_filename, show_progress=False):
        """
        Read the `nodes.dmp` and `names.dmp` files from the NCBI Taxonomy
        database and build a NcbiFileTaxonomy.

        Example:
            taxonomy = NcbiFileTaxonomy.from_ncbi_files("data/nodes.dmp", "data/names.dmp")
        """
        logger.info(f"Loading taxonomy nodes from {nodes_filename}")
        child_ids_by_parent_id, id_to_rank = collect_edges(read_nodes(nodes_filename, show_progress))
        forest, id_to_node = build_forest(child_ids_by_parent_id, id_to_rank)

        logger.info(f"Loading scientific names from {names_filename}")
        id_to_name = {}
        name_to_node = {}
        for record in read_scientific_names(names_filename, show_progress):
            node = id_to_node.get(record.taxon_id)
            if node is None:
                raise TaxonomyIntegrityError(
                    f"names.dmp refers to taxon {record.taxon_id} which is not in nodes.dmp")
            existing = name_to_node.get(record.name)
            if existing is not None and existing != node:
                raise TaxonomyIntegrityError(
                    f"scientific name {record.name!r} is used by taxa "
                    f"{forest.taxon_id(existing)} and {record.taxon_id}")
            previous_name = id_to_name.get(record.taxon_id)
            if previous_name is not None and previous_name != record.name:
                logger.warning(f"Taxon {record.taxon_id} has more than one scientific name, "
                               f"keeping {record.name!r}")
                del name_to_node[previous_name]
            id_to_name[record.taxon_id] = record.name
            name_to_node[record.name] = node

        logger.info(f"Loaded {len(forest)} taxonomy nodes and {len(id_to_name)} scientific names")
        return cls(forest, id_to_node, id_to_rank, id_to_name, name_to_node)

    @classmethod
    def from_directory(cls, directory, prefix="", show_progress=False):
        """Load `{prefix}nodes.dmp` and `{prefix}names.dmp` from `directory`."""
        nodes_path, names_path = dump_paths(directory, prefix)
        return cls.from_ncbi_files(nodes_path, names_path, show_progress)

    def __len__(self):
        return len(self._forest)

    def contains_id(self, taxon_id: int) -> bool:
        return taxon_id in self._id_to_node

    def contains_name(self, name: str) -> bool:
        return name in self._name_to_node

    def node_by_id(self, taxon_id: int) -> Optional[int]:
        """Get the forest handle of the node with a numeric NCBI Taxonomy ID."""
        return self._id_to_node.get(taxon_id)

    def id_by_node(self, node: int) -> Optional[int]:
        """Get the NCBI Taxonomy ID held by the node with a given handle."""
        return self._forest.taxon_id(node)

    def name_by_id(self, taxon_id: int) -> Optional[str]:
        return self._id_to_name.get(taxon_id)

    def id_by_name(self, name: str) -> Optional[int]:
        node = self._name_to_node.get(name)
        if node is None:
            return None
        return self._forest.taxon_id(node)

    def rank_by_id(self, taxon_id: int) -> Optional[str]:
        return self._id_to_rank.get(taxon_id)

    def taxon_ids(self) -> Iterator[int]:
        return iter(self._id_to_node)

    def root_ids(self) -> List[int]:
        return [self._forest.taxon_id(root) for root in self._forest.roots()]

    def child_ids(self, taxon_id: int) -> Tuple[int, ...]:
        node = self._id_to_node.get(taxon_id)
        if node is None:
            return ()
        return tuple(self._forest.taxon_id(child) for child in self._forest.children(node))

    def traversal(self, from_id: int) -> Optional[Iterator[int]]:
        """
        Traverse the tree (in depth first order) from the node with a given
        NCBI Taxonomy ID, yielding taxon ids. None if the id is unknown.
        """
        node = self._id_to_node.get(from_id)
        if node is None:
            return None
        return (self._forest.taxon_id(handle) for handle in self._forest.traverse(node))

    def _ancestor_ids(self, taxon_id: int) -> Optional[Iterator[int]]:
        node = self._id_to_node.get(taxon_id)
        if node is None:
            return None
        return (self._forest.taxon_id(handle) for handle in self._forest.ancestors(node))

    def is_descendant_by_id(self, taxon_id: int, ancestor_id: int) -> bool:
        node = self._id_to_node.get(taxon_id)
        if node is None:
            return False
        ancestor_node = self._id_to_node.get(ancestor_id)
        if ancestor_node is None:
            return False
        for handle in self._forest.ancestors(node):
            if handle == ancestor_node:
                return True
        return False
