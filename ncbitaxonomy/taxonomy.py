from abc import ABC, abstractmethod
from typing import Iterable, List, Optional, Tuple

from .common_ancestor import find_common_ancestor


class NcbiTaxonomy(ABC):
    """
    Query interface shared by every taxonomy backend.

    Callers (sequence filters, the command line utility) only rely on this
    class and cannot tell which backend answers. Lookups of unknown ids or
    names return None or False; they never raise.

    Subclasses provide the id/name lookups, the descendant test and the two
    providers used by the common ancestor search: `_ancestor_ids` (nearest
    first, excluding the taxon) and `rank_by_id`.
    """

    @abstractmethod
    def contains_id(self, taxon_id: int) -> bool:
        """Check whether the taxonomy contains a (number) ID."""

    @abstractmethod
    def contains_name(self, name: str) -> bool:
        """
        Check whether the taxonomy contains a node with the specified name.

        The name is the 'scientific name' of the NCBI Taxonomy database;
        synonyms are not indexed.
        """

    @abstractmethod
    def is_descendant_by_id(self, taxon_id: int, ancestor_id: int) -> bool:
        """Check if the taxon with `taxon_id` lies below `ancestor_id`."""

    @abstractmethod
    def name_by_id(self, taxon_id: int) -> Optional[str]:
        pass

    @abstractmethod
    def id_by_name(self, name: str) -> Optional[int]:
        pass

    @abstractmethod
    def rank_by_id(self, taxon_id: int) -> Optional[str]:
        pass

    @abstractmethod
    def _ancestor_ids(self, taxon_id: int) -> Optional[Iterable[int]]:
        pass

    def is_descendant(self, name: str, ancestor_name: str) -> bool:
        """Check if a certain named node is a descendant of another named node."""
        taxon_id = self.id_by_name(name)
        if taxon_id is None:
            return False
        ancestor_id = self.id_by_name(ancestor_name)
        if ancestor_id is None:
            return False
        return self.is_descendant_by_id(taxon_id, ancestor_id)

    def lineage(self, taxon_id: int) -> Optional[List[int]]:
        """Ids from the root down to and including `taxon_id`."""
        ancestor_ids = self._ancestor_ids(taxon_id)
        if ancestor_ids is None:
            return None
        lineage = list(ancestor_ids)
        lineage.reverse()
        lineage.append(taxon_id)
        return lineage

    def lineage_by_name(self, name: str) -> Optional[List[int]]:
        taxon_id = self.id_by_name(name)
        if taxon_id is None:
            return None
        return self.lineage(taxon_id)

    def common_ancestor_by_id(self, taxid1: int, taxid2: int,
                              only_canonical: bool = False) -> Optional[Tuple[int, int]]:
        """Return `(distance, common ancestor id)` for two taxa, or None."""
        return find_common_ancestor(taxid1, taxid2, self._ancestor_ids, self.rank_by_id, only_canonical)

    def common_ancestor(self, name1: str, name2: str,
                        only_canonical: bool = False) -> Optional[Tuple[int, str]]:
        """Return `(distance, common ancestor name)` for two named taxa, or None."""
        taxid1 = self.id_by_name(name1)
        taxid2 = self.id_by_name(name2)
        if taxid1 is None or taxid2 is None:
            return None
        found = self.common_ancestor_by_id(taxid1, taxid2, only_canonical)
        if found is None:
            return None
        distance, ancestor_id = found
        return distance, self.name_by_id(ancestor_id)

    def distance_to_common_ancestor_by_id(self, taxid1: int, taxid2: int,
                                          only_canonical: bool = False) -> Optional[int]:
        """
        Get the distance (in steps in the tree) to the common ancestor of
        taxid1 and taxid2. The result is not symmetric: see
        find_common_ancestor for which walk is counted.
        """
        found = self.common_ancestor_by_id(taxid1, taxid2, only_canonical)
        if found is None:
            return None
        return found[0]

    def distance_to_common_ancestor(self, name1: str, name2: str,
                                    only_canonical: bool = False) -> Optional[int]:
        """Find the distance in the tree between name1 and name2."""
        taxid1 = self.id_by_name(name1)
        taxid2 = self.id_by_name(name2)
        if taxid1 is None or taxid2 is None:
            return None
        return self.distance_to_common_ancestor_by_id(taxid1, taxid2, only_canonical)
