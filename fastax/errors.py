"""Errors raised by the fastax core."""


class FastaxError(Exception):
    """Base class for every error reported to the caller of a query."""


class NotFoundError(FastaxError, LookupError):
    """A taxid or name does not resolve, or is absent from a built tree."""


class EmptySetError(FastaxError, ValueError):
    """A lowest common ancestor was requested for fewer than two taxa."""


class MalformedPathError(FastaxError, ValueError):
    """A lineage path violates the fetcher contract (empty, wrong root, not a tree)."""


class DumpFormatError(FastaxError, ValueError):
    """A taxonomy dump archive is not a zip file or holds unreadable rows."""


class TreeFormatError(FastaxError, ValueError):
    """A tree file could not be parsed."""
