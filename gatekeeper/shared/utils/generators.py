"""Identifier generators (CUID2) for rows, token ids, request and worker ids."""

from cuid2 import Cuid

SHORT_ID_LENGTH = 10

_default = Cuid()
_short = Cuid(length=SHORT_ID_LENGTH)


def generate_cuid() -> str:
    """Return a new collision-resistant identifier (CUID2, default length)."""
    return _default.generate()


def generate_short_id() -> str:
    """Return a short CUID2, for ids that are only unique within one process."""
    return _short.generate()
