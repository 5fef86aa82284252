from .base import Base
from .taxonomy import Taxon

__all__ = [
    'Base',
    'Taxon'
]
