"""테스트 인프라 — 인메모리 SQLite DB, 세션, 레포지토리 픽스처.

Test infrastructure — In-memory SQLite database, session, and repository fixtures.
Every test gets a fresh database with the schema created from Base.metadata.
"""

from collections.abc import AsyncGenerator

import pytest_asyncio
from sqlalchemy.ext.asyncio import AsyncEngine, AsyncSession, async_sessionmaker

from generic_repository.database import Base, build_session_factory, create_engine_from_url
from generic_repository.repositories.base import Repository
from tests.models import Category, Item

# ---------------------------------------------------------------------------
# 테스트 DB 설정
# ---------------------------------------------------------------------------
TEST_DATABASE_URL = "sqlite+aiosqlite:///:memory:"


# ---------------------------------------------------------------------------
# Function-scoped: 엔진, 세션, 레포지토리
# ---------------------------------------------------------------------------
@pytest_asyncio.fixture
async def engine() -> AsyncGenerator[AsyncEngine, None]:
    """테스트용 async 엔진. 매 테스트마다 새 스키마를 생성합니다."""
    eng = create_engine_from_url(TEST_DATABASE_URL)
    async with eng.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    yield eng
    await eng.dispose()


@pytest_asyncio.fixture
async def session_factory(engine: AsyncEngine) -> async_sessionmaker[AsyncSession]:
    return build_session_factory(engine)


@pytest_asyncio.fixture
async def db(session_factory: async_sessionmaker[AsyncSession]) -> AsyncGenerator[AsyncSession, None]:
    """각 테스트에 격리된 DB 세션을 제공합니다."""
    async with session_factory() as session:
        yield session


@pytest_asyncio.fixture
async def item_repo(db: AsyncSession) -> Repository[Item, int]:
    return Repository(db, Item)


# ---------------------------------------------------------------------------
# 헬퍼 픽스처: 테스트용 데이터 생성
# ---------------------------------------------------------------------------
@pytest_asyncio.fixture
async def items(session_factory: async_sessionmaker[AsyncSession]) -> list[Item]:
    """A(id=1, value=10), B(id=2, value=20), C(id=3, value=30)을 생성합니다."""
    rows = [
        Item(id=1, name="A", value=10),
        Item(id=2, name="B", value=20),
        Item(id=3, name="C", value=30),
    ]
    async with session_factory() as seed:
        seed.add_all(rows)
        await seed.commit()
    return rows


@pytest_asyncio.fixture
async def categorized_items(session_factory: async_sessionmaker[AsyncSession]) -> list[Item]:
    """카테고리에 속한 항목들을 생성합니다."""
    tools = Category(id=1, name="Tools")
    rows = [
        Item(id=1, name="Hammer", value=15, category=tools),
        Item(id=2, name="Wrench", value=25, category=tools),
    ]
    async with session_factory() as seed:
        seed.add(tools)
        seed.add_all(rows)
        await seed.commit()
    return rows


async def reload(
    session_factory: async_sessionmaker[AsyncSession], model: type, id: object
) -> object | None:
    """별도 세션으로 행을 다시 읽습니다 (Read a row back through a fresh session)."""
    async with session_factory() as fresh:
        return await fresh.get(model, id)
