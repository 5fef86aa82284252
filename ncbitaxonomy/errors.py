"""Exceptions raised while loading or querying a taxonomy.

Unknown ids, unknown names and "no common ancestor" are not errors: the query
methods return None or False for those.
"""


class TaxonomyError(Exception):
    """Base class for every taxonomy load or query failure."""


class TaxonomyIOError(TaxonomyError):
    """A dump file is missing or unreadable, or the database is unavailable."""


class FormatError(TaxonomyError):
    """A dump line has fewer fields than expected."""

    def __init__(self, line, line_number=None, path=None):
        self.line = line
        self.line_number = line_number
        self.path = path
        location = f"{path}:{line_number}" if path is not None else f"line {line_number}"
        super().__init__(f"format error in {location}: {line!r}")


class ParseError(TaxonomyError):
    """A field that should hold a non-negative integer does not."""

    def __init__(self, field, value, line_number=None):
        self.field = field
        self.value = value
        self.line_number = line_number
        super().__init__(f"failed to parse integer {field} from {value!r} (line {line_number})")


class TaxonomyIntegrityError(TaxonomyError):
    """The taxonomy data contradicts itself (dangling name, duplicate key, cycle)."""
