"""
Gestionnaires d'exceptions utilisés par la factory.
- BookingError (et sous-classes): JSON {"detail": message} avec le code HTTP du type.
- ValidationError: ajoute la liste "errors" (champ, message) pour le formulaire.
- RequestValidationError (FastAPI): même format que la ValidationError métier (422).
"""
import logging

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse

from belizevibes.errors import BookingError, ValidationError

logger = logging.getLogger(__name__)

def register_exception_handlers(app: FastAPI) -> None:
    @app.exception_handler(BookingError)
    async def booking_error_handler(request: Request, exc: BookingError):
        if exc.status_code >= 500:
            logger.warning("%s on %s %s: %s", exc.code, request.method, request.url.path, exc.message)
        content = {"detail": exc.message, "code": exc.code}
        if isinstance(exc, ValidationError) and exc.errors:
            content["errors"] = exc.errors
        return JSONResponse(status_code=exc.status_code, content=content)

    @app.exception_handler(RequestValidationError)
    async def request_validation_handler(request: Request, exc: RequestValidationError):
        errors = [
            {"field": ".".join(str(p) for p in err.get("loc") or () if p != "body"), "message": err.get("msg")}
            for err in exc.errors()
        ]
        return JSONResponse(
            status_code=422,
            content={"detail": ValidationError.default_message, "code": "ValidationError", "errors": errors},
        )
