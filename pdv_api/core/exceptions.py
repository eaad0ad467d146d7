"""
Errores de dominio del PDV

Los servicios lanzan estas excepciones; el handler registrado en main.py
las traduce a respuestas HTTP con {"detail", "code"}.
"""
from fastapi import Request, status
from fastapi.responses import JSONResponse
import logging

logger = logging.getLogger(__name__)


class PDVError(Exception):
    """Error base del dominio"""
    status_code = status.HTTP_400_BAD_REQUEST
    code = "pdv_error"
    retryable = False

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class ValidationError(PDVError):
    """Montos no positivos, descripción vacía, etc."""
    status_code = 422
    code = "validation_error"


class ConflictError(PDVError):
    """Apertura duplicada o carrera perdida contra una restricción única"""
    status_code = status.HTTP_409_CONFLICT
    code = "conflict"


class AlreadyClosedError(ConflictError):
    code = "already_closed"


class NotFoundError(PDVError):
    status_code = status.HTTP_404_NOT_FOUND
    code = "not_found"


class ClosedRegisterError(PDVError):
    """Mutación intentada sobre (o después de) una caja cerrada"""
    status_code = status.HTTP_409_CONFLICT
    code = "closed_register"


class StaleReadingError(PDVError):
    """Lectura de la balanza fuera de la ventana de frescura. Nunca llega al cliente."""
    code = "stale_reading"


class TransientStoreError(PDVError):
    """Timeout o fallo de I/O del store; el cliente puede reintentar"""
    status_code = status.HTTP_503_SERVICE_UNAVAILABLE
    code = "store_unavailable"
    retryable = True


async def pdv_error_handler(request: Request, exc: PDVError) -> JSONResponse:
    if exc.status_code >= 500:
        logger.error(f"{request.method} {request.url.path} -> {exc.code}: {exc.message}")
    else:
        logger.warning(f"{request.method} {request.url.path} -> {exc.code}: {exc.message}")

    content = {"detail": exc.message, "code": exc.code}
    if exc.retryable:
        content["retryable"] = True
    return JSONResponse(status_code=exc.status_code, content=content)
