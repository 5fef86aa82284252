"""ncbitaxonomy: work with a local copy of the NCBI Taxonomy database."""

from .backend import open_taxonomy
from .common_ancestor import CANONICAL_RANKS
from .db_taxonomy import NcbiDbTaxonomy
from .errors import (
    FormatError,
    ParseError,
    TaxonomyError,
    TaxonomyIntegrityError,
    TaxonomyIOError,
)
from .export import export_taxonomy
from .file_taxonomy import NcbiFileTaxonomy
from .taxonomy import NcbiTaxonomy

__all__ = [
    "CANONICAL_RANKS",
    "FormatError",
    "NcbiDbTaxonomy",
    "NcbiFileTaxonomy",
    "NcbiTaxonomy",
    "ParseError",
    "TaxonomyError",
    "TaxonomyIntegrityError",
    "TaxonomyIOError",
    "export_taxonomy",
    "open_taxonomy",
]

__version__ = "1.0.7"
