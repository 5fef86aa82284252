import os
from pathlib import Path

from sqlalchemy import create_engine

from .errors import TaxonomyIOError

DEFAULT_DB_URL = "sqlite:///taxonomy.sqlite"
DB_URL_ENV_VARS = ("TAXONOMY_DB_URL", "DATABASE_URL")

NODES_FILENAME = "nodes.dmp"
NAMES_FILENAME = "names.dmp"


def get_db_url(db_url=None):
    """
    Resolve the database connection URL.

    An explicit URL wins, then TAXONOMY_DB_URL, then DATABASE_URL, then a
    SQLite file in the working directory.
    """
    if db_url:
        return db_url
    for env_var in DB_URL_ENV_VARS:
        value = os.getenv(env_var)
        if value:
            return value
    return DEFAULT_DB_URL


def get_db_engine(db_url):
    return create_engine(db_url)


def missing_sqlite_file(engine):
    """
    Path of the SQLite file behind `engine` when that file does not exist,
    else None. Connecting would create it.
    """
    url = engine.url
    if url.get_backend_name() != "sqlite" or url.query.get("uri"):
        return None
    if not url.database or url.database == ":memory:":
        return None
    path = Path(url.database)
    return None if path.is_file() else path


def dump_paths(directory, prefix=""):
    """Return the paths of `{prefix}nodes.dmp` and `{prefix}names.dmp` in `directory`."""
    directory = Path(directory)
    nodes_path = directory / f"{prefix}{NODES_FILENAME}"
    names_path = directory / f"{prefix}{NAMES_FILENAME}"
    for path in (nodes_path, names_path):
        if not path.is_file():
            raise TaxonomyIOError(f"NCBI Taxonomy {path.name} file not found in {directory}")
    return nodes_path, names_path
