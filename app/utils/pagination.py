import math
from typing import Dict


def build_pagination(page: int, limit: int, total: int) -> Dict[str, int]:
    return {
        "page": page,
        "limit": limit,
        "total": total,
        "total_pages": math.ceil(total / limit) if limit else 0,
    }


def offset_for(page: int, limit: int) -> int:
    return (page - 1) * limit
