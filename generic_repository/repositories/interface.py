"""레포지토리 계약(인터페이스) 모듈.

Repository contract module.
Declares the operations every generic repository offers. The FastAPI
registration binds this contract to ``Repository`` unless the host
registers another implementation.
"""

from abc import ABC, abstractmethod
from typing import Generic, TypeVar

from generic_repository.pagination import PaginatedResult
from generic_repository.repositories.query import FilterSpec, IncludeSpec, OrderSpec

EntityType = TypeVar("EntityType")
KeyType = TypeVar("KeyType")


class AbstractRepository(ABC, Generic[EntityType, KeyType]):
    """제네릭 레포지토리 계약.

    Generic repository contract for one entity type and its key type.
    Every returned entity is detached from the session; argument errors
    are raised before any I/O and persistence errors propagate unchanged.
    """

    @abstractmethod
    async def get_all(
        self,
        includes: IncludeSpec | None = None,
        where: FilterSpec | None = None,
        order_by: OrderSpec | None = None,
        ascending: bool = True,
    ) -> list[EntityType]:
        """조건에 맞는 모든 엔티티를 즉시 로딩하여 반환합니다.

        Return every matching entity, fully materialized.
        """

    @abstractmethod
    async def get_by_id(self, id: KeyType) -> EntityType | None:
        """ID로 엔티티를 조회합니다. 없으면 None (Absence is None, never an error)."""

    @abstractmethod
    async def create(self, entity: EntityType) -> EntityType:
        """새 엔티티를 저장합니다 (Persist a new entity)."""

    @abstractmethod
    async def update(self, entity: EntityType) -> EntityType:
        """엔티티 전체를 갱신합니다 (Whole-record update)."""

    @abstractmethod
    async def delete(self, entity: EntityType) -> None:
        """엔티티를 삭제합니다 (Delete an entity)."""

    @abstractmethod
    async def delete_by_id(self, id: KeyType) -> None:
        """조회 없이 ID로 삭제합니다 (Delete by key without loading first)."""

    @abstractmethod
    async def get_paginated(
        self,
        page_number: int,
        page_size: int,
        includes: IncludeSpec | None = None,
        where: FilterSpec | None = None,
        order_by: OrderSpec | None = None,
        ascending: bool = True,
    ) -> PaginatedResult[EntityType]:
        """한 페이지의 엔티티와 전체 개수를 반환합니다.

        Return one page of entities plus the total count of the filtered
        collection.
        """

    @abstractmethod
    async def count(self, where: FilterSpec | None = None) -> int:
        """조건에 맞는 행 수 (Number of matching rows)."""

    @abstractmethod
    async def exists(self, where: FilterSpec) -> bool:
        """조건에 맞는 행 존재 여부 (Whether any row matches)."""
