"""Shared response pieces for paginated ledger listings"""
import math

from pydantic import BaseModel


class PaginationMeta(BaseModel):
    """Page position and totals of a listing"""
    page: int
    page_size: int
    total_items: int
    total_pages: int

    @classmethod
    def for_page(cls, page: int, page_size: int, total_items: int) -> "PaginationMeta":
        """Build metadata for one page out of total_items rows"""
        return cls(
            page=page,
            page_size=page_size,
            total_items=total_items,
            total_pages=math.ceil(total_items / page_size) if total_items else 0,
        )
