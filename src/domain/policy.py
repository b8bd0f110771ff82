"""
Business policy helpers shared by both storage backends.

Pure functions only: derived profile fields and the ordering used by the
"top N" dashboard queries.
"""

from __future__ import annotations

import re
from collections.abc import Iterable
from typing import TypeVar

from src.domain.entities import Record

R = TypeVar("R", bound=Record)

DEFAULT_WEB_LINK_BASE = "bizmanager.com"

_WHITESPACE = re.compile(r"\s+")


def web_link_for(company_name: str, base: str = DEFAULT_WEB_LINK_BASE) -> str:
    """Public page address derived from the company name.

    >>> web_link_for("Acme  Corp")
    'bizmanager.com/acme-corp'
    """
    if not company_name:
        return ""
    return f"{base}/{_WHITESPACE.sub('-', company_name.lower())}"


def rank_key(record: Record, field: str) -> tuple[float, int]:
    """Sort key: field descending (missing counts as 0), then id ascending."""
    value = getattr(record, field, None) or 0
    return (-value, record.id)


def top_by(records: Iterable[R], field: str, limit: int) -> list[R]:
    return sorted(records, key=lambda r: rank_key(r, field))[:limit]
