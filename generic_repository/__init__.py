"""제네릭 레포지토리 — SQLAlchemy 비동기 세션 위의 CRUD/페이지네이션 계층.

Generic repository over the SQLAlchemy asyncio ORM: CRUD, filtered
retrieval and pagination for any mapped entity, registered through
FastAPI dependency injection.
"""

from generic_repository.database import Base, build_session_factory, create_engine_from_url, session_scope
from generic_repository.dependencies import add_repository_registration, get_repository, get_session
from generic_repository.exceptions import (
    EntityNotFoundError,
    InvalidArgumentError,
    OutOfRangeError,
    RepositoryError,
)
from generic_repository.pagination import PaginatedResult
from generic_repository.repositories import AbstractRepository, Repository

__all__ = [
    "AbstractRepository",
    "Base",
    "EntityNotFoundError",
    "InvalidArgumentError",
    "OutOfRangeError",
    "PaginatedResult",
    "Repository",
    "RepositoryError",
    "add_repository_registration",
    "build_session_factory",
    "create_engine_from_url",
    "get_repository",
    "get_session",
    "session_scope",
]
