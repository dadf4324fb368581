"""쿼리 파이프라인 빌더 모듈.

Query pipeline builder module.
Applies the optional steps of a repository read in a fixed order:
collection → includes → filter → order, then page or count on top.
"""

from collections.abc import Sequence
from typing import Any

from sqlalchemy import ColumnElement, Select, asc, desc, func, select
from sqlalchemy.orm import QueryableAttribute
from sqlalchemy.sql.base import ExecutableOption

from generic_repository.pagination import page_offset

# 로더 옵션 목록 — e.g. [selectinload(Order.lines)]
IncludeSpec = Sequence[ExecutableOption]
# 불리언 컬럼 표현식 — e.g. Item.value > 10
FilterSpec = ColumnElement[bool]
# 정렬 기준 컬럼 — e.g. Item.value
OrderSpec = ColumnElement[Any] | QueryableAttribute[Any]


def build_query(
    model: type[Any],
    *,
    includes: IncludeSpec | None = None,
    where: FilterSpec | None = None,
    order_by: OrderSpec | None = None,
    ascending: bool = True,
) -> Select[Any]:
    """엔티티 조회 쿼리를 조립합니다.

    Compose a SELECT for ``model`` from the optional pipeline steps.

    Args:
        model: 매핑된 엔티티 클래스 (Mapped entity class)
        includes: 즉시 로딩할 관계 옵션 (Loader options for related records)
        where: 필터 표현식 (Boolean filter expression)
        order_by: 정렬 기준 (Column to order by)
        ascending: 오름차순 여부 (Ascending when True, descending otherwise)

    Returns:
        Select: 조립된 쿼리 (Composed query, not yet executed)
    """
    query: Select[Any] = select(model)

    if includes:
        query = query.options(*includes)

    # ClauseElement는 bool 평가가 불가하므로 None과 직접 비교
    if where is not None:
        query = query.where(where)

    if order_by is not None:
        query = query.order_by(asc(order_by) if ascending else desc(order_by))

    return query


def build_count_query(model: type[Any], where: FilterSpec | None = None) -> Select[Any]:
    """필터만 적용된 COUNT 쿼리를 생성합니다.

    Build a COUNT over the filtered collection. Includes and ordering are
    left out since they do not change the count.
    """
    query: Select[Any] = select(model)
    if where is not None:
        query = query.where(where)
    return select(func.count()).select_from(query.subquery())


def apply_page(query: Select[Any], page_number: int, page_size: int) -> Select[Any]:
    """OFFSET/LIMIT을 적용합니다 (Apply offset and limit for one page)."""
    return query.offset(page_offset(page_number, page_size)).limit(page_size)
