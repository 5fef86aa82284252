"""
Export an in-memory taxonomy to the `taxonomy` table.

Every taxon becomes one row whose `ancestry` column holds the ids of its
ancestors from the root to its immediate parent, joined by "/". The whole
export runs in a single transaction: on any error no row is committed.
"""

import logging

import pandas as pd
from pandas.errors import DatabaseError
from sqlalchemy import delete
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from tqdm import tqdm

from .config import get_db_engine
from .errors import TaxonomyIntegrityError, TaxonomyIOError
from .models import Base, Taxon

logger = logging.getLogger(__name__)

ANCESTRY_SEPARATOR = "/"
COLUMNS = ["id", "ancestry", "name", "rank"]


def taxon_records(taxonomy, show_progress=False):
    """
    Yield one {id, ancestry, name, rank} dict per taxon.

    Walks each tree of the forest once, depth first, carrying the ancestry
    path of the current node down to its children.
    """
    progress = tqdm(total=len(taxonomy), desc="Exporting taxa", unit=" taxa", disable=not show_progress)
    with progress:
        for root_id in taxonomy.root_ids():
            stack = [(root_id, None)]
            while stack:
                taxon_id, ancestry = stack.pop()
                yield {
                    "id": taxon_id,
                    "ancestry": ancestry,
                    "name": taxonomy.name_by_id(taxon_id),
                    "rank": taxonomy.rank_by_id(taxon_id),
                }
                progress.update(1)
                if ancestry is None:
                    child_ancestry = str(taxon_id)
                else:
                    child_ancestry = f"{ancestry}{ANCESTRY_SEPARATOR}{taxon_id}"
                for child_id in reversed(taxonomy.child_ids(taxon_id)):
                    stack.append((child_id, child_ancestry))


def _caused_by_integrity_error(error):
    # pandas may wrap the driver error in its own DatabaseError; DB-API drivers
    # name their constraint violation class IntegrityError
    seen = set()
    while error is not None and id(error) not in seen:
        if isinstance(error, IntegrityError) or type(error).__name__ == "IntegrityError":
            return True
        seen.add(id(error))
        error = error.__cause__ or error.__context__
    return False


def taxa_frame(taxonomy, show_progress=False):
    return pd.DataFrame.from_records(list(taxon_records(taxonomy, show_progress)), columns=COLUMNS)


def export_taxonomy(taxonomy, db_url, replace_existing=False, show_progress=False, chunksize=50000):
    """
    Save a NcbiFileTaxonomy to the database at `db_url`.

    Creates the `taxonomy` table if needed. With `replace_existing`, rows
    already in the table are deleted first (in the same transaction).
    Returns the number of rows written.
    """
    frame = taxa_frame(taxonomy, show_progress)
    engine = get_db_engine(db_url)
    logger.info(f"Writing {len(frame)} taxa to {engine.url.render_as_string(hide_password=True)}")
    try:
        with engine.begin() as connection:
            Base.metadata.create_all(connection, tables=[Taxon.__table__], checkfirst=True)
            if replace_existing:
                logger.info(f"Clearing existing data from {Taxon.__tablename__}...")
                connection.execute(delete(Taxon.__table__))
            frame.to_sql(Taxon.__tablename__, connection, if_exists="append", index=False, chunksize=chunksize)
    except (SQLAlchemyError, DatabaseError) as e:
        logger.error(f"Error exporting taxonomy to {Taxon.__tablename__}: {e}")
        if _caused_by_integrity_error(e):
            raise TaxonomyIntegrityError(f"taxonomy export rejected by the database: {e}") from e
        raise TaxonomyIOError(f"taxonomy export failed: {e}") from e
    finally:
        engine.dispose()
    logger.info(f"Successfully exported {len(frame)} taxa.")
    return len(frame)
