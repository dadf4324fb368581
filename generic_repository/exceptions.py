"""레포지토리 예외 클래스 모듈.

Repository exception classes module.
Argument errors are raised before any database I/O. Persistence errors
from SQLAlchemy are never wrapped and reach the caller unchanged.

Each class carries an HTTP status hint used only by the optional FastAPI
handlers in ``generic_repository.handlers``.

Usage:
    from generic_repository.exceptions import InvalidArgumentError
    raise InvalidArgumentError("entity must not be None")
"""

from fastapi import status


class RepositoryError(Exception):
    """모든 레포지토리 예외의 기본 클래스.

    Base class for errors raised by the repository itself.

    Args:
        message: 오류 메시지 (Error message)
    """

    status_code: int = status.HTTP_500_INTERNAL_SERVER_ERROR
    default_message: str = "Repository error"

    def __init__(self, message: str | None = None) -> None:
        self.message: str = message or self.default_message
        super().__init__(self.message)


class InvalidArgumentError(RepositoryError, ValueError):
    """필수 엔티티/식별자가 없거나 타입이 잘못된 경우.

    Raised when a required entity or identifier is missing or of the wrong type.
    """

    status_code = status.HTTP_400_BAD_REQUEST
    default_message = "Invalid argument"


class OutOfRangeError(RepositoryError, ValueError):
    """페이지 번호 또는 페이지 크기가 범위를 벗어난 경우.

    Raised when pagination parameters are out of range
    (page number below 1, page size of 0 or less).
    """

    status_code = status.HTTP_400_BAD_REQUEST
    default_message = "Argument out of range"


class EntityNotFoundError(RepositoryError, LookupError):
    """식별자로 삭제할 행이 존재하지 않는 경우.

    Raised when a keyed delete matched no row.
    """

    status_code = status.HTTP_404_NOT_FOUND
    default_message = "Entity not found"
