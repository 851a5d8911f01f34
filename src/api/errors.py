"""Error translation for API endpoints."""

from collections.abc import Iterator
from contextlib import contextmanager

from fastapi import FastAPI, HTTPException, Request
from fastapi.encoders import jsonable_encoder
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse

from src.decision.errors import (
    InvalidInputError,
    InvalidStepError,
    RequestInFlightError,
    SessionNotFoundError,
)


async def validation_error_handler(
    request: Request, exc: RequestValidationError
) -> JSONResponse:
    """Reject malformed request bodies with 400 before any work is done."""
    fields = sorted(
        {
            str(err["loc"][-1])
            for err in exc.errors()
            if err.get("loc") and err["loc"][0] == "body"
        }
    )
    message = "Missing or invalid fields"
    if fields:
        message = f"{message}: {', '.join(fields)}"
    return JSONResponse(
        status_code=400,
        content={"error": message, "detail": jsonable_encoder(exc.errors())},
    )


def install_error_handlers(app: FastAPI) -> None:
    """Register shared exception handlers on an app."""
    app.add_exception_handler(RequestValidationError, validation_error_handler)


@contextmanager
def session_errors() -> Iterator[None]:
    """Translate decision session errors into HTTP errors.

    Raises:
        HTTPException: 404 unknown session, 409 wrong step or request
            in flight, 400 invalid input
    """
    try:
        yield
    except SessionNotFoundError as e:
        raise HTTPException(status_code=404, detail=str(e)) from e
    except (InvalidStepError, RequestInFlightError) as e:
        raise HTTPException(status_code=409, detail=str(e)) from e
    except InvalidInputError as e:
        raise HTTPException(status_code=400, detail=str(e)) from e
