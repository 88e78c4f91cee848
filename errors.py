"""
Service-level error taxonomy.

Every error carries the HTTP status it is rendered with, so services can
raise them without knowing about FastAPI and routes need no try/except.
"""
from fastapi import Request, status
from fastapi.responses import JSONResponse


class ServiceError(Exception):
    status_code = status.HTTP_500_INTERNAL_SERVER_ERROR

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class ValidationError(ServiceError):
    status_code = status.HTTP_422_UNPROCESSABLE_ENTITY


class NotFoundError(ServiceError):
    status_code = status.HTTP_404_NOT_FOUND


class ConflictError(ServiceError):
    status_code = status.HTTP_409_CONFLICT


class NotAuthorizedError(ServiceError):
    status_code = status.HTTP_403_FORBIDDEN


class BackendError(ServiceError):
    status_code = status.HTTP_503_SERVICE_UNAVAILABLE


async def service_error_handler(request: Request, exc: ServiceError) -> JSONResponse:
    return JSONResponse(status_code=exc.status_code, content={"detail": exc.message})
