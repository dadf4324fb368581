"""데이터베이스 엔진 및 세션 설정 모듈.

Database engine and session configuration module.
Provides the ORM base class, async engine construction, the session
factory every repository session comes from, and a unit-of-work scope
for hosts that do not use FastAPI dependency injection.
"""

import logging
from collections.abc import AsyncGenerator
from contextlib import asynccontextmanager
from typing import Any

from sqlalchemy.engine import make_url
from sqlalchemy.ext.asyncio import AsyncEngine, AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.orm import DeclarativeBase
from sqlalchemy.pool import StaticPool

from generic_repository.config import settings

logger = logging.getLogger(__name__)

_engine: AsyncEngine | None = None
_session_factory: async_sessionmaker[AsyncSession] | None = None


class Base(DeclarativeBase):
    """SQLAlchemy 선언적 베이스 클래스.

    Declarative base class for all entities managed by a repository.
    Every mapped subclass is constructible without arguments and exposes
    its primary key column(s) as plain attributes.
    """

    pass


def create_engine_from_url(
    url: str,
    *,
    echo: bool = False,
    pool_size: int = 5,
    max_overflow: int = 10,
    pool_pre_ping: bool = True,
    disable_statement_cache: bool = False,
) -> AsyncEngine:
    """URL에 맞는 비동기 엔진을 생성합니다.

    Create an async engine configured for the given database URL.

    SQLite URLs share a single connection through StaticPool so in-memory
    databases survive across sessions. Server URLs get a regular pool with
    pre-ping enabled.

    Args:
        url: 비동기 연결 문자열 (Async connection string)
        echo: SQL 로그 출력 여부 (Log emitted SQL)
        pool_size: 커넥션 풀 크기 (Pool size, server databases only)
        max_overflow: 풀 초과 허용 수 (Overflow, server databases only)
        pool_pre_ping: 사용 전 커넥션 검증 (Validate connections before use)
        disable_statement_cache: asyncpg 캐시 비활성화 (Disable asyncpg statement cache)

    Returns:
        AsyncEngine: 생성된 엔진 (Configured engine)
    """
    parsed = make_url(url)

    if parsed.get_backend_name() == "sqlite":
        engine = create_async_engine(
            url,
            echo=echo,
            poolclass=StaticPool,
            connect_args={"check_same_thread": False},
        )
    else:
        connect_args: dict[str, Any] = {}
        if disable_statement_cache:
            connect_args["statement_cache_size"] = 0
        engine = create_async_engine(
            url,
            echo=echo,
            pool_pre_ping=pool_pre_ping,
            pool_size=pool_size,
            max_overflow=max_overflow,
            connect_args=connect_args,
        )

    logger.info("Created async engine for %s", parsed.render_as_string(hide_password=True))
    return engine


def build_session_factory(
    engine: AsyncEngine,
    session_class: type[AsyncSession] = AsyncSession,
) -> async_sessionmaker[AsyncSession]:
    """엔진에 바인딩된 세션 팩토리를 생성합니다.

    Build a session factory bound to ``engine``.

    expire_on_commit=False: 커밋 후에도 분리된 객체의 속성 접근 가능
    (Detached entities keep their loaded attributes after commit)
    """
    return async_sessionmaker(engine, class_=session_class, expire_on_commit=False)


def get_async_engine() -> AsyncEngine:
    """설정값으로 전역 엔진을 지연 생성합니다 (Lazily create the process-wide engine)."""
    global _engine

    if _engine is None:
        _engine = create_engine_from_url(
            settings.DATABASE_URL,
            echo=settings.DEBUG,
            pool_size=settings.DB_POOL_SIZE,
            max_overflow=settings.DB_MAX_OVERFLOW,
            pool_pre_ping=settings.DB_POOL_PRE_PING,
            disable_statement_cache=settings.DB_DISABLE_STATEMENT_CACHE,
        )
    return _engine


def get_session_factory() -> async_sessionmaker[AsyncSession]:
    """전역 세션 팩토리를 반환합니다 (Return the process-wide session factory)."""
    global _session_factory

    if _session_factory is None:
        _session_factory = build_session_factory(get_async_engine())
    return _session_factory


async def reset_engine() -> None:
    """전역 엔진과 세션 팩토리를 폐기합니다.

    Dispose the process-wide engine and forget the session factory.
    """
    global _engine, _session_factory

    if _engine is not None:
        await _engine.dispose()
    _engine = None
    _session_factory = None


@asynccontextmanager
async def session_scope(
    factory: async_sessionmaker[AsyncSession] | None = None,
) -> AsyncGenerator[AsyncSession, None]:
    """하나의 작업 단위(unit of work) 세션을 제공합니다.

    Provide one unit-of-work session outside of FastAPI.
    Repositories commit their own changes; this scope only rolls back on
    error and closes the session at the end.

    Usage:
        async with session_scope() as session:
            repo = Repository(session, Item)
            await repo.create(Item(name="x"))

    Yields:
        AsyncSession: 비동기 세션 인스턴스 (Async session instance)
    """
    factory = factory or get_session_factory()
    async with factory() as session:
        try:
            yield session
        except Exception:
            await session.rollback()
            raise
