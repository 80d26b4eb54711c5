"""페이지네이션 유틸리티 모듈.

Pagination utility module. Provides the Page response model shared by every
list endpoint; the offset/limit query itself lives in
``DocumentRepository.get_paginated``.
"""

import math
from typing import Generic, Sequence, TypeVar

from pydantic import BaseModel

T = TypeVar("T")

# 페이지 크기 상한 — Upper bound for per_page on list endpoints
MAX_PER_PAGE = 100


class Page(BaseModel, Generic[T]):
    """페이지네이션 결과 모델.

    Pagination result model for typed responses.

    Attributes:
        items: 현재 페이지 항목 목록 (Items for the current page)
        total: 전체 항목 수 (Total count across all pages)
        page: 현재 페이지 번호 (Current page number, 1-based)
        per_page: 페이지당 항목 수 (Items per page)
        pages: 전체 페이지 수 (Total number of pages)
    """

    items: list[T]
    total: int
    page: int  # 1부터 시작 (1-indexed)
    per_page: int
    pages: int  # ceil(total / per_page)


def build_page(items: Sequence[T], total: int, page: int, per_page: int) -> Page[T]:
    """항목과 전체 개수로 Page를 만듭니다 (Assemble a Page with its page count)."""
    return Page(
        items=list(items),
        total=total,
        page=page,
        per_page=per_page,
        pages=math.ceil(total / per_page) if per_page else 0,
    )
