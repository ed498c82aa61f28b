from __future__ import annotations

import math
from dataclasses import dataclass
from typing import Dict


@dataclass
class Pagination:
    current_page: int
    total_pages: int
    total_count: int
    limit: int

    @classmethod
    def build(cls, page: int, limit: int, total: int) -> "Pagination":
        return cls(
            current_page=page,
            total_pages=math.ceil(total / limit) if limit else 0,
            total_count=total,
            limit=limit,
        )

    def to_dict(self) -> Dict[str, int]:
        return {
            "currentPage": self.current_page,
            "totalPages": self.total_pages,
            "totalCount": self.total_count,
            "limit": self.limit,
        }
