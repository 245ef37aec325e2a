import math
from typing import Tuple


def page_bounds(page: int = 1, limit: int = 10) -> Tuple[int, int, int]:
    """Normalise page/limit and return (page, skip, limit)."""
    if page < 1:
        page = 1

    if limit < 1:
        limit = 10

    return page, (page - 1) * limit, limit


def build_pagination(*, page: int, limit: int, total: int) -> dict:
    return {
        "currentPage": page,
        "totalPages": math.ceil(total / limit),
        "totalOrders": total,
        "hasNext": page * limit < total,
        "hasPrev": page > 1,
    }
