"""
Taxonomy backed by the `taxonomy` table written by export.py.

No tree is held in memory: each query reads the rows it needs, and the
ancestors of a taxon are read from the "/"-separated ids in its `ancestry`
column. Each instance owns one session; threads should open their own
instance instead of sharing one.
"""

import logging
from typing import List, Optional

from sqlalchemy import inspect, or_
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import sessionmaker

from .config import get_db_engine, missing_sqlite_file
from .errors import TaxonomyIntegrityError, TaxonomyIOError
from .dump_parser import is_taxon_id
from .export import ANCESTRY_SEPARATOR
from .models import Taxon
from .taxonomy import NcbiTaxonomy

logger = logging.getLogger(__name__)


def ancestry_ids(ancestry) -> List[int]:
    """Split an ancestry path into ids, oldest first."""
    if not ancestry:
        return []
    return [int(token) for token in ancestry.split(ANCESTRY_SEPARATOR)]


def ancestry_contains(ancestor_id):
    """SQL condition: `ancestor_id` is one of the tokens of Taxon.ancestry."""
    token = str(ancestor_id)
    return or_(
        Taxon.ancestry == token,
        Taxon.ancestry.like(f"{token}{ANCESTRY_SEPARATOR}%"),
        Taxon.ancestry.like(f"%{ANCESTRY_SEPARATOR}{token}{ANCESTRY_SEPARATOR}%"),
        Taxon.ancestry.like(f"%{ANCESTRY_SEPARATOR}{token}"),
    )


class NcbiDbTaxonomy(NcbiTaxonomy):

    def __init__(self, db_url):
        self.db_url = db_url
        try:
            self.engine = get_db_engine(db_url)
            missing = missing_sqlite_file(self.engine)
            if missing is not None:
                self.engine.dispose()
                raise TaxonomyIOError(f"taxonomy database file {missing} does not exist")
            has_table = inspect(self.engine).has_table(Taxon.__tablename__)
        except SQLAlchemyError as e:
            raise TaxonomyIOError(f"cannot open taxonomy database {db_url}: {e}") from e
        if not has_table:
            self.engine.dispose()
            raise TaxonomyIOError(f"no {Taxon.__tablename__} table in database {db_url}")
        Session = sessionmaker(bind=self.engine)
        self.session = Session()
        logger.debug(f"Opened taxonomy database {self.engine.url.render_as_string(hide_password=True)}")

    def close(self):
        self.session.close()
        self.engine.dispose()

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        self.close()

    def _unique(self, query, key):
        """Return the single row of a unique-key query, or None."""
        rows = query.limit(2).all()
        if len(rows) > 1:
            raise TaxonomyIntegrityError(f"more than one {Taxon.__tablename__} row matches {key}")
        return rows[0] if rows else None

    def _taxon(self, taxon_id):
        if not is_taxon_id(taxon_id):
            return None
        return self._unique(self.session.query(Taxon).filter(Taxon.id == taxon_id), f"id {taxon_id}")

    def _taxon_by_name(self, name):
        return self._unique(self.session.query(Taxon).filter(Taxon.name == name), f"name {name!r}")

    def contains_id(self, taxon_id: int) -> bool:
        return self._taxon(taxon_id) is not None

    def contains_name(self, name: str) -> bool:
        return self._taxon_by_name(name) is not None

    def name_by_id(self, taxon_id: int) -> Optional[str]:
        taxon = self._taxon(taxon_id)
        return taxon.name if taxon is not None else None

    def id_by_name(self, name: str) -> Optional[int]:
        taxon = self._taxon_by_name(name)
        return taxon.id if taxon is not None else None

    def rank_by_id(self, taxon_id: int) -> Optional[str]:
        taxon = self._taxon(taxon_id)
        return taxon.rank if taxon is not None else None

    def _ancestor_ids(self, taxon_id: int) -> Optional[List[int]]:
        taxon = self._taxon(taxon_id)
        if taxon is None:
            return None
        ancestor_ids = ancestry_ids(taxon.ancestry)
        ancestor_ids.reverse()
        return ancestor_ids

    def is_descendant_by_id(self, taxon_id: int, ancestor_id: int) -> bool:
        if not (is_taxon_id(taxon_id) and is_taxon_id(ancestor_id)):
            return False
        query = self.session.query(Taxon.id).filter(Taxon.id == taxon_id, ancestry_contains(ancestor_id))
        return self._unique(query, f"id {taxon_id}") is not None
