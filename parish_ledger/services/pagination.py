"""Page/limit bookkeeping shared by list endpoints."""

import math
from dataclasses import dataclass


@dataclass
class Pagination:
    page: int
    limit: int
    total: int
    pages: int

    @classmethod
    def build(cls, page: int, limit: int, total: int) -> "Pagination":
        return cls(page=page, limit=limit, total=total, pages=math.ceil(total / limit))

    @property
    def offset(self) -> int:
        return (self.page - 1) * self.limit


def paginate(items: list, page: int, limit: int) -> tuple[list, Pagination]:
    """Slice an in-memory list into one page and describe the paging."""
    pagination = Pagination.build(page, limit, len(items))
    return items[pagination.offset : pagination.offset + limit], pagination


__all__ = ["Pagination", "paginate"]
