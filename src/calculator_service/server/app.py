"""HTTP adapter exposing the expression engine."""
from typing import Dict, Optional

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from calculator_service.common.config import ServiceConfig
from calculator_service.common.errors import DivisionByZeroError, EvaluationError
from calculator_service.common.logger import logger, set_log_level
from calculator_service.common.operations import CalculateRequest, CalculateResponse
from calculator_service.common.parser import evaluate, format_result

INVALID_EXPRESSION = "Expression is not valid"
DIVISION_BY_ZERO = "Division by zero"


def _empty(status_code: int, headers: Optional[Dict[str, str]] = None) -> JSONResponse:
    """Response carrying neither a result nor an error."""
    return JSONResponse(status_code=status_code, content={}, headers=headers)


def _outcome(status_code: int, response: CalculateResponse) -> JSONResponse:
    return JSONResponse(status_code=status_code, content=response.model_dump(exclude_none=True))


def create_app(config: Optional[ServiceConfig] = None) -> FastAPI:
    """
    Build the FastAPI application.

    Routes:
        - POST ``config.api_path``: evaluate ``{"expression": ...}``
    Status codes:
        - 200 with ``result`` on success
        - 400 with an empty body when the expression is missing, empty or not a string
        - 405 with an empty body for any other method
        - 422 with ``error`` when the engine rejects the expression

    :param ServiceConfig config: Service settings, defaults when omitted

    :return: Configured application
    :rtype: FastAPI
    """
    config = config or ServiceConfig()
    set_log_level(config.log_level)

    app = FastAPI(title="Calculator service", docs_url=None, redoc_url=None, openapi_url=None)
    app.state.config = config

    @app.exception_handler(StarletteHTTPException)
    async def http_error(request: Request, exc: StarletteHTTPException) -> JSONResponse:
        logger.warning(f"🚫 {request.method} {request.url.path} -> {exc.status_code}")
        return _empty(exc.status_code, getattr(exc, "headers", None))

    @app.exception_handler(RequestValidationError)
    async def bad_request(request: Request, exc: RequestValidationError) -> JSONResponse:
        logger.warning(f"🚫 Malformed request body on {request.url.path}")
        return _empty(400)

    # Plain def: the ASGI server runs each evaluation in its thread pool
    @app.post(config.api_path)
    def calculate(payload: CalculateRequest) -> JSONResponse:
        if not payload.expression:
            logger.warning("🚫 Empty expression rejected")
            return _empty(400)

        try:
            value = evaluate(payload.expression, max_depth=config.max_depth)
        except DivisionByZeroError as exc:
            logger.warning(f"➗❌ {exc.kind}: {payload.expression!r}")
            message = DIVISION_BY_ZERO if config.report_division_by_zero else INVALID_EXPRESSION
            return _outcome(422, CalculateResponse(error=message))
        except EvaluationError as exc:
            logger.warning(f"🧮❌ {exc.kind} ({exc}): {payload.expression!r}")
            return _outcome(422, CalculateResponse(error=INVALID_EXPRESSION))

        result = format_result(value)
        logger.info(f"🧮✅ {payload.expression!r} = {result}")
        return _outcome(200, CalculateResponse(result=result))

    return app
