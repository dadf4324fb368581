"""레포지토리 조회 테스트.

Repository read tests — get_all, get_by_id, count and exists.
Covers filtering, ordering, eager includes and detached results.
"""

import pytest
from sqlalchemy import inspect
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload
from sqlalchemy.orm.exc import DetachedInstanceError

from generic_repository.exceptions import InvalidArgumentError
from generic_repository.repositories.base import Repository
from tests.models import Item, Membership


class TestRepositoryInit:
    """레포지토리 생성 테스트."""

    async def test_requires_session(self):
        """세션 없이 생성 시 InvalidArgumentError."""
        with pytest.raises(InvalidArgumentError):
            Repository(None, Item)  # type: ignore[arg-type]

    async def test_requires_mapped_class(self, db: AsyncSession):
        """매핑되지 않은 클래스로 생성 시 InvalidArgumentError."""

        class NotMapped:
            id = 1

        with pytest.raises(InvalidArgumentError):
            Repository(db, NotMapped)


class TestGetAll:
    """전체 조회 테스트."""

    async def test_get_all_empty(self, item_repo: Repository):
        assert await item_repo.get_all() == []

    async def test_get_all_returns_every_row(self, item_repo: Repository, items):
        result = await item_repo.get_all(order_by=Item.id)
        assert [i.name for i in result] == ["A", "B", "C"]
        assert isinstance(result, list)

    async def test_get_all_with_filter(self, item_repo: Repository, items):
        """필터 표현식 적용."""
        result = await item_repo.get_all(where=Item.value >= 20, order_by=Item.value)
        assert [i.name for i in result] == ["B", "C"]

    async def test_get_all_ascending_sorted(self, item_repo: Repository, items):
        result = await item_repo.get_all(order_by=Item.value)
        values = [i.value for i in result]
        assert values == sorted(values)

    async def test_descending_is_reverse_of_ascending(self, item_repo: Repository, items):
        """내림차순 결과는 오름차순 결과의 역순."""
        asc_result = await item_repo.get_all(where=Item.value > 10, order_by=Item.value)
        desc_result = await item_repo.get_all(
            where=Item.value > 10, order_by=Item.value, ascending=False
        )
        assert [i.id for i in desc_result] == [i.id for i in reversed(asc_result)]

    async def test_results_are_detached(self, item_repo: Repository, db: AsyncSession, items):
        """조회 결과는 세션에서 분리되어 있어야 함."""
        result = await item_repo.get_all()
        assert result
        for item in result:
            assert inspect(item).detached
            assert item not in db

    async def test_include_loads_relationship(self, item_repo: Repository, categorized_items):
        """includes로 로드한 관계는 분리 후에도 접근 가능."""
        result = await item_repo.get_all(includes=[selectinload(Item.category)], order_by=Item.id)
        assert [i.category.name for i in result] == ["Tools", "Tools"]
        assert inspect(result[0].category).detached

    async def test_relationship_not_included_raises(self, item_repo: Repository, categorized_items):
        """includes 없이 관계 접근 시 지연 로딩 대신 DetachedInstanceError."""
        result = await item_repo.get_all(order_by=Item.id)
        with pytest.raises(DetachedInstanceError):
            _ = result[0].category


class TestGetById:
    """단건 조회 테스트."""

    async def test_get_existing(self, item_repo: Repository, items):
        item = await item_repo.get_by_id(2)
        assert item is not None
        assert item.name == "B"
        assert item.value == 20

    async def test_get_missing_on_empty_table(self, item_repo: Repository):
        """빈 테이블에서 조회 시 예외가 아닌 None."""
        assert await item_repo.get_by_id(999) is None

    async def test_get_none_id(self, item_repo: Repository):
        assert await item_repo.get_by_id(None) is None

    async def test_result_is_detached(self, item_repo: Repository, db: AsyncSession, items):
        item = await item_repo.get_by_id(1)
        assert inspect(item).detached
        assert item not in db

    async def test_mutating_result_does_not_affect_next_read(self, item_repo: Repository, items):
        """반환된 객체를 수정해도 다음 조회에 영향 없음."""
        item = await item_repo.get_by_id(1)
        item.value = 999

        again = await item_repo.get_by_id(1)
        assert again is not item
        assert again.value == 10

    async def test_get_by_composite_key(self, db: AsyncSession):
        """복합 키는 튜플로 조회."""
        db.add(Membership(user_id=1, group_id=2, role="owner"))
        await db.commit()

        repo: Repository[Membership, tuple[int, int]] = Repository(db, Membership)
        membership = await repo.get_by_id((1, 2))
        assert membership is not None
        assert membership.role == "owner"
        assert await repo.get_by_id((2, 1)) is None


class TestCountAndExists:
    """개수/존재 여부 테스트."""

    async def test_count_all(self, item_repo: Repository, items):
        assert await item_repo.count() == 3

    async def test_count_with_filter(self, item_repo: Repository, items):
        assert await item_repo.count(Item.value > 10) == 2

    async def test_exists(self, item_repo: Repository, items):
        assert await item_repo.exists(Item.name == "C") is True
        assert await item_repo.exists(Item.name == "Z") is False
