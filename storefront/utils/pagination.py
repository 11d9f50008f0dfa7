"""Pagination block attached to listing responses"""
from typing import Any, Dict, List


def total_pages_for(total: int, limit: int) -> int:
    """At least one page, even when nothing matches"""
    return max(1, -(-total // limit))


def create_paginated_response(items: List[Any], total: int, page: int, limit: int) -> Dict[str, Any]:
    """``items`` for one page plus counts describing where that page sits"""
    pages = total_pages_for(total, limit)
    return {
        "items": items,
        "pagination": {
            "current_page": page,
            "total_pages": pages,
            "total_records": total,
            "limit": limit,
            "has_next": page < pages,
            "has_prev": page > 1,
        },
    }
