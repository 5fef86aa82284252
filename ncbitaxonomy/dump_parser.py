"""
Streaming readers for the NCBI Taxonomy dump files.

Both files use "\\t|\\t" between fields and end every line with "\\t|":

    nodes.dmp:  tax_id | parent tax_id | rank | embl code | division id | ...
    names.dmp:  tax_id | name_txt | unique name | name class |

Only the first three columns of nodes.dmp and the "scientific name" rows of
names.dmp are used.
"""

import logging
import numbers
import re
from collections import defaultdict
from typing import Dict, Iterable, Iterator, List, NamedTuple, Optional, Tuple

from tqdm import tqdm

from .errors import FormatError, ParseError, TaxonomyIOError

logger = logging.getLogger(__name__)

FIELD_SEPARATOR = "\t|\t"
SCIENTIFIC_NAME = "scientific name"

# taxon ids are unsigned 32-bit integers
MAX_TAXON_ID = 2**32 - 1

_UNSIGNED_INT_RE = re.compile(r"[0-9]+")


class NodeRecord(NamedTuple):
    taxon_id: int
    parent_id: int
    rank: Optional[str]


class NameRecord(NamedTuple):
    taxon_id: int
    name: str


def split_fields(line):
    """Split a dump line into fields, dropping the trailing "\\t|" artifact."""
    line = line.rstrip("\r\n")
    if line.endswith("\t|"):
        line = line[:-2]
    return line.split(FIELD_SEPARATOR)


def parse_taxon_id(value, field, line_number=None):
    value = value.strip()
    if not _UNSIGNED_INT_RE.fullmatch(value) or int(value) > MAX_TAXON_ID:
        raise ParseError(field, value, line_number)
    return int(value)


def is_taxon_id(value):
    """True for an int that can be a taxon id (0 to MAX_TAXON_ID)."""
    return isinstance(value, numbers.Integral) and 0 <= value <= MAX_TAXON_ID


def _iter_lines(path, desc, show_progress):
    try:
        handle = open(path, "r", encoding="utf-8")
    except OSError as e:
        raise TaxonomyIOError(f"cannot open {path}: {e}") from e
    with handle:
        lines = tqdm(handle, desc=desc, unit=" lines", disable=not show_progress)
        try:
            for line_number, line in enumerate(lines, start=1):
                if not line.strip():
                    continue
                yield line_number, line
        except (OSError, UnicodeDecodeError) as e:
            raise TaxonomyIOError(f"error reading {path}: {e}") from e


def read_nodes(path, show_progress=False) -> Iterator[NodeRecord]:
    """Yield one NodeRecord per line of nodes.dmp."""
    for line_number, line in _iter_lines(path, "Reading nodes.dmp", show_progress):
        fields = split_fields(line)
        if len(fields) < 3:
            raise FormatError(line.rstrip("\r\n"), line_number, path)
        taxon_id = parse_taxon_id(fields[0], "tax_id", line_number)
        parent_id = parse_taxon_id(fields[1], "parent tax_id", line_number)
        rank = fields[2].strip() or None
        yield NodeRecord(taxon_id, parent_id, rank)


def read_scientific_names(path, show_progress=False) -> Iterator[NameRecord]:
    """
    Yield the scientific name of each taxon in names.dmp.

    When the unique-name column is filled in it is used instead of name_txt;
    NCBI only fills it for homonyms (e.g. "Bacillus <bacterium>").
    """
    for line_number, line in _iter_lines(path, "Reading names.dmp", show_progress):
        fields = split_fields(line)
        if len(fields) < 4:
            raise FormatError(line.rstrip("\r\n"), line_number, path)
        if not fields[3].startswith(SCIENTIFIC_NAME):
            continue
        taxon_id = parse_taxon_id(fields[0], "tax_id", line_number)
        unique_name = fields[2].strip()
        yield NameRecord(taxon_id, unique_name or fields[1])


def collect_edges(records: Iterable[NodeRecord]) -> Tuple[Dict[int, List[int]], Dict[int, Optional[str]]]:
    """Group node records into parent -> children edges and an id -> rank map.

    The root row (parent id equal to its own id) contributes no edge.
    """
    child_ids_by_parent_id = defaultdict(list)
    id_to_rank = {}
    for record in records:
        if record.taxon_id in id_to_rank:
            logger.warning(f"Taxon {record.taxon_id} appears more than once in nodes.dmp")
        id_to_rank[record.taxon_id] = record.rank
        if record.parent_id != record.taxon_id:
            child_ids_by_parent_id[record.parent_id].append(record.taxon_id)
    logger.info(f"Parsed {len(id_to_rank)} nodes with {len(child_ids_by_parent_id)} parent taxa")
    return dict(child_ids_by_parent_id), id_to_rank
