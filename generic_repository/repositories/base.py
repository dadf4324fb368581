"""제네릭 레포지토리 — 모든 엔티티 타입에 공통인 CRUD 및 조회.

Generic Repository — CRUD, filtered retrieval and pagination for any
mapped entity type.

The repository owns no state besides the session it was constructed with.
Every operation is a short pass-through to the session, and every entity
it returns is detached so no tracked reference leaves the call. Argument
errors are raised before any I/O; SQLAlchemy errors propagate unchanged.

Usage:
    async with session_scope() as session:
        repo: Repository[Item, int] = Repository(session, Item)
        page = await repo.get_paginated(1, 20, order_by=Item.name)
"""

import logging
from typing import Any

from sqlalchemy import ColumnElement, and_, delete, inspect
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import Mapper
from sqlalchemy.orm.attributes import flag_modified
from sqlalchemy.orm.session import make_transient_to_detached

from generic_repository.exceptions import EntityNotFoundError, InvalidArgumentError
from generic_repository.pagination import PaginatedResult, validate_page
from generic_repository.repositories.interface import AbstractRepository, EntityType, KeyType
from generic_repository.repositories.query import (
    FilterSpec,
    IncludeSpec,
    OrderSpec,
    apply_page,
    build_count_query,
    build_query,
)
from generic_repository.repositories.tracking import detach

logger = logging.getLogger(__name__)


class Repository(AbstractRepository[EntityType, KeyType]):
    """제네릭 CRUD 레포지토리.

    Generic repository for one mapped entity type.

    Attributes:
        session: 작업 단위 세션 (Unit-of-work session)
        model: 이 레포지토리가 관리할 엔티티 클래스 (Entity class this repository manages)
    """

    def __init__(self, session: AsyncSession, model: type[EntityType]) -> None:
        """레포지토리를 초기화합니다.

        Args:
            session: 비동기 데이터베이스 세션 (Async database session)
            model: 매핑된 엔티티 클래스 (Mapped entity class)

        Raises:
            InvalidArgumentError: 세션이 없거나 매핑되지 않은 클래스
                                  (Missing session or unmapped class)
        """
        if session is None:
            raise InvalidArgumentError("session must not be None")

        mapper: Mapper[Any] | None = inspect(model, raiseerr=False) if isinstance(model, type) else None
        if mapper is None:
            raise InvalidArgumentError(f"{model!r} is not a mapped entity class")

        self.session: AsyncSession = session
        self.model: type[EntityType] = model
        self._mapper: Mapper[Any] = mapper
        # 기본 키 컬럼 순서대로의 속성 이름 — Key attribute names in primary key column order
        self._key_names: tuple[str, ...] = tuple(
            mapper.get_property_by_column(column).key for column in mapper.primary_key
        )

    # ------------------------------------------------------------------
    # 조회 — Reads
    # ------------------------------------------------------------------

    async def get_all(
        self,
        includes: IncludeSpec | None = None,
        where: FilterSpec | None = None,
        order_by: OrderSpec | None = None,
        ascending: bool = True,
    ) -> list[EntityType]:
        """조건에 맞는 모든 엔티티를 조회합니다.

        Retrieve all entities with optional includes, filter and ordering.
        The result is materialized into a list and detached, so it stays
        usable after the session is closed.

        Args:
            includes: 즉시 로딩할 관계 옵션 (Loader options, e.g. [selectinload(Item.tags)])
            where: 필터 표현식 (Boolean filter expression)
            order_by: 정렬 기준 컬럼 (Column to order by)
            ascending: 오름차순 여부 (Ascending when True)

        Returns:
            list[EntityType]: 분리된 엔티티 목록 (Detached entities)
        """
        logger.debug("get_all %s", self.model.__name__)

        query = build_query(
            self.model, includes=includes, where=where, order_by=order_by, ascending=ascending
        )
        result = await self.session.execute(query)
        items: list[EntityType] = list(result.scalars().unique().all())

        detach(self.session, items)
        return items

    async def get_by_id(self, id: KeyType) -> EntityType | None:
        """ID로 단일 엔티티를 조회합니다.

        Retrieve a single entity by primary key. Composite keys are passed
        as a tuple in primary key column order.

        Returns:
            EntityType | None: 분리된 엔티티 또는 None (Detached entity or None)
        """
        if id is None:
            return None

        logger.debug("get_by_id %s id=%r", self.model.__name__, id)

        entity: EntityType | None = await self.session.get(self.model, id)
        if entity is None:
            return None

        # 세션 추적에서 분리 — Caller receives a detached snapshot
        detach(self.session, [entity])
        return entity

    async def get_paginated(
        self,
        page_number: int,
        page_size: int,
        includes: IncludeSpec | None = None,
        where: FilterSpec | None = None,
        order_by: OrderSpec | None = None,
        ascending: bool = True,
    ) -> PaginatedResult[EntityType]:
        """페이지네이션이 적용된 엔티티 목록을 조회합니다.

        Retrieve one page of entities.
        Runs two queries: a COUNT with only the filter applied, then the page
        itself with includes, filter, ordering and OFFSET/LIMIT. The two are
        not snapshot-consistent under concurrent writes.

        Args:
            page_number: 현재 페이지 번호, 1부터 시작 (Page number, 1-based)
            page_size: 페이지당 항목 수 (Items per page)
            includes: 즉시 로딩할 관계 옵션 (Loader options)
            where: 필터 표현식 (Boolean filter expression)
            order_by: 정렬 기준 컬럼 (Column to order by)
            ascending: 오름차순 여부 (Ascending when True)

        Returns:
            PaginatedResult[EntityType]: 페이지 결과 (Page of detached entities)

        Raises:
            OutOfRangeError: page_number < 1 또는 page_size <= 0
        """
        validate_page(page_number, page_size)

        logger.debug(
            "get_paginated %s page=%d size=%d", self.model.__name__, page_number, page_size
        )

        # 전체 개수 조회 — includes/정렬 없이 필터만 적용 (Count with filter only)
        total_items: int = await self.count(where)

        # 페이지 항목 조회 — OFFSET/LIMIT 적용 (Fetch page items with offset/limit)
        query = build_query(
            self.model, includes=includes, where=where, order_by=order_by, ascending=ascending
        )
        result = await self.session.execute(apply_page(query, page_number, page_size))
        items: list[EntityType] = list(result.scalars().unique().all())

        detach(self.session, items)

        return PaginatedResult(
            items=items,
            current_page=page_number,
            page_size=page_size,
            total_items=total_items,
        )

    async def count(self, where: FilterSpec | None = None) -> int:
        """조건에 맞는 레코드 수를 반환합니다 (Count rows matching ``where``)."""
        total: int = (await self.session.execute(build_count_query(self.model, where))).scalar() or 0
        return total

    async def exists(self, where: FilterSpec) -> bool:
        """조건식에 일치하는 행이 하나라도 있는지 확인합니다.

        True when the boolean column expression ``where`` (e.g.
        ``Item.value > 10``) matches at least one row. Answered with the
        same COUNT as ``count``.
        """
        return await self.count(where) > 0

    # ------------------------------------------------------------------
    # 변경 — Writes
    # ------------------------------------------------------------------

    async def create(self, entity: EntityType) -> EntityType:
        """새 엔티티를 생성합니다.

        Insert ``entity``, load server-generated values, commit, and detach.

        Returns:
            EntityType: 분리된 생성 엔티티 (The created, detached entity)

        Raises:
            InvalidArgumentError: 엔티티가 None이거나 타입 불일치
        """
        self._require_entity(entity, "create")

        logger.debug("create %s", self.model.__name__)

        self.session.add(entity)
        await self.session.flush()
        await self.session.refresh(entity)
        await self.session.commit()

        detach(self.session, [entity])
        return entity

    async def update(self, entity: EntityType) -> EntityType:
        """기존 엔티티 전체를 갱신합니다.

        Update the whole record identified by ``entity``'s key.
        The entity is attached as a reference to the existing row without
        reading it first, and every loaded non-key column is written.
        A missing row surfaces as SQLAlchemy's StaleDataError.

        Returns:
            EntityType: 분리된 엔티티 (The updated, detached entity)

        Raises:
            InvalidArgumentError: 엔티티가 None, 타입 불일치, 식별자 없음,
                                  또는 기록할 컬럼 없음 (Key-only entity)
        """
        self._require_entity(entity, "update")

        # 키 외에 기록할 값이 없으면 UPDATE가 생략되어 누락된 행을 감지할 수 없음
        state = inspect(entity)
        columns = [
            attr.key
            for attr in self._mapper.column_attrs
            if attr.key in state.dict and not any(column.primary_key for column in attr.columns)
        ]
        if not columns:
            raise InvalidArgumentError("update: entity carries no column values besides its key")

        self._attach_by_identity(entity, "update")

        logger.debug("update %s id=%r", self.model.__name__, self._identity_of(entity))

        self.session.add(entity)

        # 부분 갱신이 아닌 전체 갱신 — Mark every loaded non-key column modified
        for key in columns:
            flag_modified(entity, key)

        await self.session.flush()
        await self.session.commit()

        detach(self.session, [entity])
        return entity

    async def delete(self, entity: EntityType) -> None:
        """엔티티를 삭제합니다.

        Delete ``entity`` and commit. Deleted instances leave the session on
        commit, so no explicit detach follows.

        A newly constructed (never loaded) instance is removed with
        the same keyed DELETE as ``delete_by_id`` and fails the same way when
        no row matches. Loaded entities go through ``Session.delete`` so ORM
        cascades apply.

        Raises:
            InvalidArgumentError: 엔티티가 None, 타입 불일치, 또는 식별자 없음
            EntityNotFoundError: 새로 생성된 객체와 일치하는 행이 없음
                                 (No row matched a never-loaded instance)
        """
        self._require_entity(entity, "delete")

        identity = self._identity_of(entity)
        logger.debug("delete %s id=%r", self.model.__name__, identity)

        if inspect(entity).transient:
            if any(value is None for value in identity):
                raise InvalidArgumentError("delete: entity has no identifier")
            await self._delete_by_key(identity)
            return

        await self.session.delete(entity)
        await self.session.commit()

    async def delete_by_id(self, id: KeyType) -> None:
        """ID로 엔티티를 삭제합니다.

        Delete the row identified by ``id`` with a single keyed DELETE,
        without loading it first.

        Raises:
            InvalidArgumentError: ID가 None이거나 복합 키 길이 불일치
            EntityNotFoundError: 일치하는 행이 없음 (No row matched)
        """
        if id is None:
            raise InvalidArgumentError("id must not be None")

        logger.debug("delete_by_id %s id=%r", self.model.__name__, id)

        await self._delete_by_key(id if isinstance(id, tuple) else (id,))

    # ------------------------------------------------------------------
    # 내부 헬퍼 — Internal helpers
    # ------------------------------------------------------------------

    async def _delete_by_key(self, values: tuple[Any, ...]) -> None:
        """키 값으로 단일 DELETE를 실행하고 커밋합니다."""
        clause = self._identity_clause(values)

        result = await self.session.execute(
            delete(self.model).where(clause).execution_options(synchronize_session="evaluate")
        )
        if result.rowcount == 0:
            key = values[0] if len(values) == 1 else values
            raise EntityNotFoundError(f"{self.model.__name__} with id {key!r} does not exist")

        await self.session.commit()

    def _require_entity(self, entity: Any, operation: str) -> None:
        if entity is None:
            raise InvalidArgumentError(f"{operation}: entity must not be None")
        if not isinstance(entity, self.model):
            raise InvalidArgumentError(
                f"{operation}: expected {self.model.__name__}, got {type(entity).__name__}"
            )

    def _identity_of(self, entity: Any) -> tuple[Any, ...]:
        """엔티티의 기본 키 값 (Primary key values, read without I/O)."""
        state = inspect(entity)
        return tuple(state.dict.get(name) for name in self._key_names)

    def _attach_by_identity(self, entity: Any, operation: str) -> None:
        """새로 생성된 객체를 기존 행에 대한 참조로 전환합니다.

        Turn a transient instance carrying its key into a detached reference
        to the existing row, so it can be attached without a read.
        """
        state = inspect(entity)
        if not state.transient:
            return
        if any(value is None for value in self._identity_of(entity)):
            raise InvalidArgumentError(f"{operation}: entity has no identifier")
        make_transient_to_detached(entity)

    def _identity_clause(self, values: tuple[Any, ...]) -> ColumnElement[bool]:
        """기본 키 비교 조건을 생성합니다 (WHERE clause matching key ``values``)."""
        if len(values) != len(self._key_names):
            raise InvalidArgumentError(
                f"{self.model.__name__} key has {len(self._key_names)} column(s), "
                f"got {len(values)} value(s)"
            )
        # 매핑된 속성으로 비교해야 synchronize_session="evaluate"가 동작
        return and_(
            *(getattr(self.model, name) == value for name, value in zip(self._key_names, values))
        )
