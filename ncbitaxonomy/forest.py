import logging
from typing import Dict, Iterator, List, Optional, Tuple

from .errors import TaxonomyIntegrityError

logger = logging.getLogger(__name__)


class TaxonomyForest:
    """
    Arena of taxon nodes addressed by integer handles.

    A handle is the node's index in the arena. Each node keeps its taxon id,
    the handle of its parent (None for a root) and the handles of its
    children in insertion order. Nodes are never removed, so a handle stays
    valid for the lifetime of the forest.
    """

    def __init__(self):
        self._taxon_ids: List[int] = []
        self._parents: List[Optional[int]] = []
        self._children: List[List[int]] = []

    def __len__(self):
        return len(self._taxon_ids)

    def is_valid(self, handle) -> bool:
        return isinstance(handle, int) and 0 <= handle < len(self._taxon_ids)

    def new_node(self, taxon_id: int) -> int:
        self._taxon_ids.append(taxon_id)
        self._parents.append(None)
        self._children.append([])
        return len(self._taxon_ids) - 1

    def append(self, parent: int, child: int) -> None:
        """Attach `child` as the last child of `parent`."""
        if parent == child:
            raise TaxonomyIntegrityError(
                f"child node same as parent node: {parent} (taxon {self._taxon_ids[parent]})")
        if self._parents[child] is not None:
            raise TaxonomyIntegrityError(
                f"taxon {self._taxon_ids[child]} already has parent "
                f"{self._taxon_ids[self._parents[child]]}")
        self._parents[child] = parent
        self._children[parent].append(child)

    def taxon_id(self, handle) -> Optional[int]:
        if not self.is_valid(handle):
            return None
        return self._taxon_ids[handle]

    def parent(self, handle: int) -> Optional[int]:
        return self._parents[handle]

    def children(self, handle: int) -> Tuple[int, ...]:
        return tuple(self._children[handle])

    def roots(self) -> Iterator[int]:
        for handle, parent in enumerate(self._parents):
            if parent is None:
                yield handle

    def ancestors(self, handle: int) -> Iterator[int]:
        """Walk parent handles from `handle` up to its root, nearest first."""
        parent = self._parents[handle]
        while parent is not None:
            yield parent
            parent = self._parents[parent]

    def traverse(self, handle: int) -> Iterator[int]:
        """Depth-first preorder traversal of the subtree rooted at `handle`."""
        stack = [handle]
        while stack:
            current = stack.pop()
            yield current
            # reversed so that children come out in insertion order
            stack.extend(reversed(self._children[current]))


def build_forest(child_ids_by_parent_id: Dict[int, List[int]],
                 id_to_rank: Dict[int, Optional[str]]) -> Tuple[TaxonomyForest, Dict[int, int]]:
    """
    Build the arena forest from the parent -> children edge map.

    Parent ids are processed in ascending order. A node is created the first
    time its id is seen, either as a parent or as a child, so children may
    appear before their own parent row. Ids that only occur in `id_to_rank`
    (a self-parented root with no children) still get a node.
    """
    forest = TaxonomyForest()
    id_to_node: Dict[int, int] = {}

    def node_for(taxon_id):
        node = id_to_node.get(taxon_id)
        if node is None:
            node = forest.new_node(taxon_id)
            id_to_node[taxon_id] = node
        return node

    for parent_id in sorted(child_ids_by_parent_id):
        parent_node = node_for(parent_id)
        for child_id in child_ids_by_parent_id[parent_id]:
            child_node = node_for(child_id)
            if child_node == parent_node:
                raise TaxonomyIntegrityError(
                    f"child node id same as node: {parent_node} (for {parent_id} {child_id})")
            forest.append(parent_node, child_node)

    for taxon_id in sorted(id_to_rank):
        node_for(taxon_id)

    # nodes on a parent cycle have no root above them
    reachable = sum(1 for root in forest.roots() for _ in forest.traverse(root))
    if reachable != len(forest):
        raise TaxonomyIntegrityError(
            f"{len(forest) - reachable} taxa are on a parent cycle and have no root")

    missing_rows = len(id_to_node) - len(id_to_rank)
    if missing_rows > 0:
        logger.warning(f"{missing_rows} parent taxa have no row of their own in nodes.dmp")
    logger.info(f"Built taxonomy forest with {len(forest)} nodes")
    return forest, id_to_node
