from fastapi import Request, status
from fastapi.responses import JSONResponse


class GreenWorkError(Exception):
    """Domain error carrying the HTTP status it should surface as."""

    status_code: int = status.HTTP_400_BAD_REQUEST

    def __init__(self, message: str, status_code: int | None = None):
        super().__init__(message)
        self.message = message
        if status_code is not None:
            self.status_code = status_code


class TaskReviewError(GreenWorkError):
    """Invalid review transition (409) or missing review input (400)."""

    status_code = status.HTTP_409_CONFLICT


class AssignmentError(GreenWorkError):
    """A task cannot be assigned with the requested due date."""


async def greenwork_error_handler(request: Request, exc: GreenWorkError) -> JSONResponse:
    return JSONResponse(status_code=exc.status_code, content={"detail": exc.message})
