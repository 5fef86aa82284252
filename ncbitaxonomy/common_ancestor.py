"""Nearest common ancestor search shared by the file and database backends."""

from typing import Callable, Dict, Iterable, Optional, Tuple

# canonical ranks (+ superkingdom) as they appear in the NCBI taxonomy database
CANONICAL_RANKS = frozenset([
    "superkingdom",
    "kingdom",
    "phylum",
    "class",
    "order",
    "family",
    "genus",
    "species",
])

AncestorProvider = Callable[[int], Optional[Iterable[int]]]
RankProvider = Callable[[int], Optional[str]]

# marks an ancestor that has no rank data while filtering on rank
_NO_RANK = object()


def _counted_steps(ancestor_ids, rank_of, only_canonical):
    """Yield the ancestors that count as a step, stopping at _NO_RANK."""
    for ancestor_id in ancestor_ids:
        if only_canonical:
            rank = rank_of(ancestor_id)
            if rank is None:
                yield _NO_RANK
                return
            if rank not in CANONICAL_RANKS:
                continue
        yield ancestor_id


def find_common_ancestor(taxid1: int, taxid2: int,
                         ancestors: AncestorProvider,
                         rank_of: RankProvider,
                         only_canonical: bool = False) -> Optional[Tuple[int, int]]:
    """
    Find the nearest common ancestor of two taxa.

    `ancestors(taxid)` returns the ancestor ids of a taxon, nearest first and
    excluding the taxon itself, or None when the taxon is unknown.
    `rank_of(taxid)` returns the rank of a taxon or None.

    Returns `(distance, ancestor_id)`, where distance is the number of steps
    taken from taxid2 (or from taxid1 when taxid2 is one of its ancestors) to
    the common ancestor. With `only_canonical`, only ancestors with a rank in
    CANONICAL_RANKS count as steps or can be reported. Returns None when
    either id is unknown or no shared ancestor is found.
    """
    chain1 = ancestors(taxid1)
    if chain1 is None:
        return None
    chain2 = ancestors(taxid2)
    if chain2 is None:
        return None
    if taxid1 == taxid2:
        return 0, taxid1

    distances: Dict[int, int] = {taxid1: 0}
    current_distance = 0
    for ancestor_id in _counted_steps(chain1, rank_of, only_canonical):
        if ancestor_id is _NO_RANK:
            return None
        current_distance += 1
        distances[ancestor_id] = current_distance

    if taxid2 in distances:
        # taxid2 is an ancestor of taxid1
        return distances[taxid2], taxid2

    current_distance = 0
    for ancestor_id in _counted_steps(chain2, rank_of, only_canonical):
        if ancestor_id is _NO_RANK:
            return None
        current_distance += 1
        if ancestor_id in distances:
            return current_distance, ancestor_id
    return None
