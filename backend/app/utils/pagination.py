"""
Pagination helpers shared by list endpoints.

Query values arrive as raw strings; anything unparseable falls back to the
default rather than failing the request.
"""

import math
from dataclasses import dataclass
from typing import Any, Dict, Optional

DEFAULT_PAGE = 1
DEFAULT_LIMIT = 10
MAX_LIMIT = 1000
# Longer digit runs saturate instead of being converted.
MAX_DIGITS = 18


@dataclass(frozen=True)
class Pagination:
    page: int
    limit: int
    skip: int

    def past_end(self, total: int) -> bool:
        """True when the page starts after the last row."""
        return self.skip >= total

    def meta(self, total: int) -> Dict[str, Any]:
        """Envelope metadata for a page of ``total`` rows."""
        total_pages = max(1, math.ceil(total / self.limit))
        return {
            "total": total,
            "totalPages": total_pages,
            "page": self.page,
            "limit": self.limit,
            "nextPage": self.page + 1 if self.page < total_pages else None,
            "prevPage": self.page - 1 if self.page > 1 else None,
        }


def _parse_int(raw: Any, default: int) -> int:
    """Leading-integer parse: "12abc" -> 12, "abc" -> default."""
    if raw is None:
        return default
    if isinstance(raw, bool):
        return default
    if isinstance(raw, int):
        return raw
    text = str(raw).strip()
    sign = ""
    if text[:1] in ("+", "-"):
        sign, text = text[:1], text[1:]
    digits = ""
    for ch in text:
        if ch not in "0123456789":
            break
        digits += ch
    if not digits:
        return default
    if len(digits) > MAX_DIGITS:
        digits = "9" * MAX_DIGITS
    return int(sign + digits)


def normalize(raw_page: Optional[Any] = None, raw_limit: Optional[Any] = None) -> Pagination:
    """Clamp page/limit into safe bounds and compute the row offset."""
    page = max(1, _parse_int(raw_page, DEFAULT_PAGE))
    limit = min(MAX_LIMIT, max(1, _parse_int(raw_limit, DEFAULT_LIMIT)))
    return Pagination(page=page, limit=limit, skip=(page - 1) * limit)
