"""레포지토리 패키지 — 데이터베이스 쿼리 계층.

Repository package — Database query layer.
Contains the generic repository contract, its SQLAlchemy implementation,
the query pipeline builder and the detach helper.
"""

from generic_repository.repositories.base import Repository
from generic_repository.repositories.interface import AbstractRepository

__all__ = ["AbstractRepository", "Repository"]
