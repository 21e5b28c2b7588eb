"""List query parsing shared by every collection endpoint.

Turns the raw `page`, `limit`, `sort` and `populate` query strings into a
`ListQuery` and builds the `{meta, data}` envelope returned to clients.
Bad input never raises: unusable values fall back to the defaults and
unknown relation names are dropped.
"""

from __future__ import annotations

import math
from dataclasses import dataclass, field
from typing import Iterable, Mapping, Optional

DEFAULT_PAGE = 1
DEFAULT_LIMIT = 10
SORT_ASC = "asc"
SORT_DESC = "desc"
# largest value a 64-bit SQL INTEGER column or OFFSET can hold
MAX_DB_INT = 2**63 - 1


def parse_positive_int(raw: Optional[str], default: int) -> int:
    """Return `raw` as an integer in `[1, MAX_DB_INT]`, or `default` when it is not one."""
    if raw is None:
        return default
    try:
        value = int(str(raw).strip())
    except ValueError:
        return default
    return value if 1 <= value <= MAX_DB_INT else default


def parse_sort(raw: Optional[str]) -> str:
    if raw is not None and raw.strip().lower() == SORT_ASC:
        return SORT_ASC
    return SORT_DESC


def parse_populate(raw: Optional[str], loadable: Mapping[str, str]) -> frozenset[str]:
    """Intersect the requested relation tokens with a resource's capability table.

    `loadable` maps the public token (e.g. `student`) to the relationship
    attribute it loads (e.g. `students`). The returned set holds attribute
    names.
    """
    if not raw:
        return frozenset()
    requested = {token.strip().lower() for token in raw.split(",") if token.strip()}
    return frozenset(loadable[token] for token in requested & loadable.keys())


@dataclass(frozen=True)
class ListQuery:
    page: int = DEFAULT_PAGE
    limit: int = DEFAULT_LIMIT
    sort: str = SORT_DESC
    relations: frozenset[str] = field(default_factory=frozenset)

    @classmethod
    def from_params(
        cls,
        loadable: Mapping[str, str],
        page: Optional[str] = None,
        limit: Optional[str] = None,
        sort: Optional[str] = None,
        populate: Optional[str] = None,
    ) -> "ListQuery":
        return cls(
            page=parse_positive_int(page, DEFAULT_PAGE),
            limit=parse_positive_int(limit, DEFAULT_LIMIT),
            sort=parse_sort(sort),
            relations=parse_populate(populate, loadable),
        )

    @property
    def offset(self) -> int:
        return (self.page - 1) * self.limit

    @property
    def ascending(self) -> bool:
        return self.sort == SORT_ASC

    def total_pages(self, total: int) -> int:
        return math.ceil(total / self.limit) if total > 0 else 0

    def envelope(self, total: int, data: Iterable[dict]) -> dict:
        """Wrap one page of serialized records with pagination metadata."""
        return {
            "meta": {
                "totalItems": total,
                "page": self.page,
                "totalPages": self.total_pages(total),
                "limit": self.limit,
                "sort": self.sort,
            },
            "data": list(data),
        }
