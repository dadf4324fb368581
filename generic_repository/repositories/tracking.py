"""엔티티 추적 해제 모듈.

Entity tracking module.
Removes entities returned by a repository from the session so the caller
holds detached snapshots. Eagerly loaded related entities are detached
along with their owner; relationships that were never loaded are left
alone and raise DetachedInstanceError if accessed later.
"""

from collections.abc import Iterable
from typing import Any

from sqlalchemy import inspect
from sqlalchemy.ext.asyncio import AsyncSession


def _loaded_related(entity: Any) -> list[Any]:
    """이미 로드된 관계의 객체 목록을 반환합니다 (No I/O)."""
    state = inspect(entity)
    related: list[Any] = []

    for relationship in state.mapper.relationships:
        if relationship.key in state.unloaded:
            continue
        value = state.dict.get(relationship.key)
        if value is None:
            continue
        if relationship.uselist:
            related.extend(value.values() if isinstance(value, dict) else value)
        else:
            related.append(value)

    return related


def detach(session: AsyncSession, entities: Iterable[Any]) -> None:
    """엔티티와 로드된 관계 객체들을 세션에서 분리합니다.

    Expunge ``entities`` and every already loaded related entity from
    ``session``. Objects that are not in the session are skipped.

    Args:
        session: 비동기 세션 (Session the entities were loaded through)
        entities: 분리할 엔티티들 (Entities to detach)
    """
    pending: list[Any] = list(entities)
    seen: set[int] = set()

    while pending:
        entity = pending.pop()
        if id(entity) in seen:
            continue
        seen.add(id(entity))

        pending.extend(_loaded_related(entity))

        if entity in session:
            session.expunge(entity)
