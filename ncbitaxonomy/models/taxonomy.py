from sqlalchemy import BigInteger, Column, Index, Integer, Text

from .base import Base


class Taxon(Base):
    """
    One row per NCBI taxon.

    `ancestry` is the materialized path of the taxon: the ids from the root
    down to its immediate parent, joined by "/" (e.g. "1/10239/12333").
    It is NULL for a root. Taxon B lies below taxon A exactly when A's id is
    one of the "/"-separated tokens of B's ancestry.
    """
    __tablename__ = "taxonomy"

    # ids go up to 2**32 - 1, past the range of a PostgreSQL INTEGER
    id = Column(BigInteger().with_variant(Integer, "sqlite"), primary_key=True, autoincrement=False)
    ancestry = Column(Text)
    name = Column(Text)
    rank = Column(Text)

    def __repr__(self):
        return f"Taxon(id={self.id}, name={self.name!r}, rank={self.rank!r})"


Index("taxonomy_name_idx", Taxon.name, unique=True)
