from .config import get_db_url
from .db_taxonomy import NcbiDbTaxonomy
from .file_taxonomy import NcbiFileTaxonomy


def open_taxonomy(db_url=None, taxonomy_dir=None, prefix="", show_progress=False):
    """
    Open a taxonomy backend.

    With `taxonomy_dir` the dump files in that directory are loaded into
    memory; otherwise the database at `db_url` (see config.get_db_url) is
    queried.
    """
    if taxonomy_dir is not None:
        return NcbiFileTaxonomy.from_directory(taxonomy_dir, prefix, show_progress)
    return NcbiDbTaxonomy(get_db_url(db_url))
