"""페이지네이션 유틸리티 모듈.

Pagination utility module.
Provides the PaginatedResult model returned by paged repository reads,
page parameter validation, and offset arithmetic.
"""

import math
from typing import Generic, TypeVar

from pydantic import BaseModel, ConfigDict, Field, computed_field

from generic_repository.exceptions import OutOfRangeError

T = TypeVar("T")


class PaginatedResult(BaseModel, Generic[T]):
    """페이지네이션 결과 모델.

    Pagination result model.
    Contains the materialized items of one page and the metadata needed for
    client-side pagination controls.

    Attributes:
        items: 현재 페이지 항목 목록 (Items for the current page)
        current_page: 현재 페이지 번호 (Current page number, 1-based)
        page_size: 페이지당 항목 수 (Items per page)
        total_items: 전체 항목 수 (Total count across all pages)
    """

    # ORM 엔티티를 그대로 담기 위해 임의 타입 허용 (Allow mapped entities as items)
    model_config = ConfigDict(arbitrary_types_allowed=True)

    items: list[T]
    current_page: int = Field(ge=1)
    page_size: int = Field(gt=0)
    total_items: int = Field(ge=0)

    @computed_field
    @property
    def total_pages(self) -> int:
        """전체 페이지 수 (Total pages, ceil(total_items / page_size))."""
        return math.ceil(self.total_items / self.page_size)

    @computed_field
    @property
    def has_next(self) -> bool:
        return self.current_page < self.total_pages

    @computed_field
    @property
    def has_previous(self) -> bool:
        return self.current_page > 1


def validate_page(page_number: int, page_size: int) -> None:
    """페이지 파라미터를 검증합니다.

    Validate pagination parameters before any query runs.

    Raises:
        OutOfRangeError: page_number < 1 또는 page_size <= 0
    """
    if page_number < 1:
        raise OutOfRangeError(f"page_number must be greater than or equal to 1, got {page_number}")
    if page_size <= 0:
        raise OutOfRangeError(f"page_size must be greater than 0, got {page_size}")


def page_offset(page_number: int, page_size: int) -> int:
    """건너뛸 레코드 수를 계산합니다 (Number of records to skip)."""
    return (page_number - 1) * page_size
