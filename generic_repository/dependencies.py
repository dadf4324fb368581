"""FastAPI 의존성 주입 모듈 — 세션 및 레포지토리 등록.

FastAPI dependency injection module — Session and repository registration.
Wires a persistence-context type and the generic repository into an
application so endpoints can declare repositories as dependencies.

Registration Flow:
    1. 호스트가 앱 생성 시 add_repository_registration()을 호출
       (Host calls add_repository_registration() while building the app)
    2. 세션 팩토리와 레포지토리 클래스가 app.state에 저장됨
       (Session factory and repository class are stored on app.state)
    3. 요청마다 get_session()이 세션 하나를 생성 (One session per request)
    4. get_repository(Model)이 그 세션으로 레포지토리를 생성
       (get_repository(Model) builds a repository around that session)

Usage:
    app = add_repository_registration(FastAPI(), engine)

    @app.get("/items/{item_id}")
    async def read_item(
        item_id: int,
        repo: Annotated[Repository[Item, int], Depends(get_repository(Item))],
    ): ...
"""

from collections.abc import AsyncGenerator, Callable, Coroutine
from functools import lru_cache
from typing import Annotated, Any

from fastapi import Depends, FastAPI, Request
from sqlalchemy.ext.asyncio import AsyncEngine, AsyncSession, async_sessionmaker

from generic_repository.database import build_session_factory, get_async_engine
from generic_repository.handlers import register_exception_handlers
from generic_repository.repositories.base import Repository
from generic_repository.repositories.interface import AbstractRepository


def add_repository_registration(
    app: FastAPI,
    engine: AsyncEngine | None = None,
    *,
    session_class: type[AsyncSession] = AsyncSession,
    repository_class: type[AbstractRepository[Any, Any]] = Repository,
    install_exception_handlers: bool = True,
) -> FastAPI:
    """앱에 세션 팩토리와 레포지토리 구현을 등록합니다.

    Register the persistence-context type and repository implementation.

    Args:
        app: FastAPI 애플리케이션 (Application to configure)
        engine: 바인딩할 엔진, None이면 설정값 기반 전역 엔진
                (Engine to bind; defaults to the engine built from settings)
        session_class: 요청마다 생성할 세션 타입 (Session type created per request)
        repository_class: get_repository가 생성할 구현 (Implementation get_repository builds)
        install_exception_handlers: 레포지토리 예외 핸들러 설치 여부
                                    (Map repository errors to HTTP responses)

    Returns:
        FastAPI: 설정된 앱 (The same app, for chaining)
    """
    app.state.session_factory = build_session_factory(engine or get_async_engine(), session_class)
    app.state.repository_class = repository_class

    if install_exception_handlers:
        register_exception_handlers(app)

    return app


async def get_session(request: Request) -> AsyncGenerator[AsyncSession, None]:
    """요청 범위의 비동기 세션을 생성하고 요청 종료 시 닫습니다.

    FastAPI dependency that yields one session per request. All
    repositories resolved within the same request share it.

    Yields:
        AsyncSession: 비동기 세션 인스턴스 (Async session instance)

    Raises:
        RuntimeError: add_repository_registration()이 호출되지 않음
    """
    factory: async_sessionmaker[AsyncSession] | None = getattr(
        request.app.state, "session_factory", None
    )
    if factory is None:
        raise RuntimeError("add_repository_registration() must be called before resolving sessions")

    async with factory() as session:
        try:
            yield session
        except Exception:
            await session.rollback()
            raise


@lru_cache(maxsize=None)
def get_repository(
    model: type[Any],
) -> Callable[..., Coroutine[Any, Any, AbstractRepository[Any, Any]]]:
    """엔티티 타입별 레포지토리 의존성을 반환합니다.

    Return the dependency providing a repository for ``model``.
    Cached per model so the returned callable can also be used as a key in
    ``app.dependency_overrides``.
    """

    async def _provide_repository(
        request: Request,
        session: Annotated[AsyncSession, Depends(get_session)],
    ) -> AbstractRepository[Any, Any]:
        repository_class: type[AbstractRepository[Any, Any]] = getattr(
            request.app.state, "repository_class", Repository
        )
        return repository_class(session, model)  # type: ignore[call-arg]

    return _provide_repository
