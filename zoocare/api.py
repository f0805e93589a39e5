import sys
from datetime import UTC, datetime

from fastapi import APIRouter, FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from loguru import logger
from starlette.exceptions import HTTPException as StarletteHTTPException

from zoocare.config import Settings, get_settings
from zoocare.database import InMemoryKeyValueDatabase
from zoocare.errors import ServerError, ZooCareError
from zoocare.models import Record
from zoocare.routers import animals, behavior, medical, tasks, users, vets

router = APIRouter()


@router.get("/health")
async def health_check() -> dict[str, str]:
    return {"status": "ok"}


def configure_logging(settings: Settings) -> None:
    logger.remove()
    logger.add(sys.stderr, level=settings.log_level.upper())


def register_error_handlers(app: FastAPI, settings: Settings) -> None:
    @app.exception_handler(ZooCareError)
    async def handle_domain_error(request: Request, exc: ZooCareError) -> JSONResponse:
        logger.info(
            f"{request.method} {request.url.path} -> {exc.status_code}: {exc.message}"
        )
        return JSONResponse(status_code=exc.status_code, content=exc.to_json())

    @app.exception_handler(RequestValidationError)
    async def handle_request_validation(
        request: Request, exc: RequestValidationError
    ) -> JSONResponse:
        first = exc.errors()[0]
        if first.get("type") == "json_invalid":
            return JSONResponse(
                status_code=400,
                content={"success": False, "message": "Malformed JSON body"},
            )
        # list indices and body offsets are not field names
        loc = [
            str(part)
            for part in first.get("loc", ())
            if not isinstance(part, int) and part not in ("body", "query", "path")
        ]
        field = loc[-1] if loc else None
        message = f"{field}: {first['msg']}" if field else first["msg"]
        content: dict = {"success": False, "message": message}
        if field:
            content["field"] = field
        return JSONResponse(status_code=400, content=content)

    @app.exception_handler(StarletteHTTPException)
    async def handle_http_error(
        request: Request, exc: StarletteHTTPException
    ) -> JSONResponse:
        return JSONResponse(
            status_code=exc.status_code,
            content={"success": False, "message": str(exc.detail)},
            headers=getattr(exc, "headers", None),
        )

    @app.exception_handler(Exception)
    async def handle_unexpected(request: Request, exc: Exception) -> JSONResponse:
        logger.exception(f"Unhandled error on {request.method} {request.url.path}")
        error = ServerError(
            "Server error" if settings.is_production() else f"Server error: {exc}"
        )
        return JSONResponse(status_code=error.status_code, content=error.to_json())


def create_app(settings: Settings | None = None) -> FastAPI:
    settings = settings or get_settings()
    configure_logging(settings)

    app = FastAPI(title="ZooCare", debug=settings.debug)
    db: InMemoryKeyValueDatabase[str, Record] = InMemoryKeyValueDatabase()
    app.state.database = db
    app.state.settings = settings
    app.state.now_fn = lambda: datetime.now(UTC)

    register_error_handlers(app, settings)
    app.include_router(router)
    app.include_router(behavior.router)
    app.include_router(vets.router)
    app.include_router(animals.router)
    app.include_router(tasks.router)
    app.include_router(users.router)
    app.include_router(medical.router)

    logger.info(f"ZooCare app created for '{settings.environment}' environment")
    return app


def main() -> None:
    import uvicorn

    uvicorn.run("zoocare.api:create_app", factory=True, host="0.0.0.0", port=8000)
