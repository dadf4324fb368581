"""레포지토리 예외 → HTTP 응답 매핑 모듈.

Maps repository errors to JSON error responses for FastAPI hosts that
opt in. Only RepositoryError subclasses are handled; SQLAlchemy errors
and everything else keep the host's own handling.
"""

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse

from generic_repository.exceptions import RepositoryError


async def repository_error_handler(request: Request, exc: RepositoryError) -> JSONResponse:
    """예외의 status_code와 메시지로 응답합니다."""
    return JSONResponse(status_code=exc.status_code, content={"detail": exc.message})


def register_exception_handlers(app: FastAPI) -> None:
    """앱에 레포지토리 예외 핸들러를 등록합니다 (Install the handler on ``app``)."""
    app.add_exception_handler(RepositoryError, repository_error_handler)  # type: ignore[arg-type]
