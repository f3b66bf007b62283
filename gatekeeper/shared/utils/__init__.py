"""Shared utilities: UTC datetime helpers and identifier generators."""

from gatekeeper.shared.utils.datetime import ensure_utc, utc_now
from gatekeeper.shared.utils.generators import generate_cuid, generate_short_id

__all__ = [
    "ensure_utc",
    "generate_cuid",
    "generate_short_id",
    "utc_now",
]
