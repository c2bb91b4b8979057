"""FastAPI application entrypoint.

Run with ``uvicorn photolibrary.main:create_app --factory``.
"""

from __future__ import annotations

from contextlib import asynccontextmanager
import logging

from fastapi import FastAPI, Request, status
from fastapi.exception_handlers import request_validation_exception_handler
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse, RedirectResponse
from fastapi.staticfiles import StaticFiles
import httpx
from starlette.middleware.sessions import SessionMiddleware
from starlette.responses import Response

from photolibrary.core.config import get_settings
from photolibrary.core.logging_safety import safe_log_identifier
from photolibrary.core.templating import STATIC_DIR, templates
from photolibrary.errors import ApiError, LoginRequiredError, UnauthorizedError, UpstreamFailureError
from photolibrary.repositories.memory import InMemoryAuthorizedClientService
from photolibrary.routes import auth_router, photos_router
from photolibrary.routes.dependencies import build_login_provider

logger = logging.getLogger(__name__)

_PAGE_VALIDATION_PATHS: dict[tuple[str, str], str] = {
    ("GET", "/photolibrary/pics"): "An album id is required to list photos.",
}


def _render_failure(request: Request, *, status_code: int, message: str) -> Response:
    return templates.TemplateResponse(
        request,
        "error.html",
        {"message": message},
        status_code=status_code,
    )


@asynccontextmanager
async def _lifespan(app: FastAPI):
    yield
    await app.state.http_client.aclose()


def create_app() -> FastAPI:
    settings = get_settings()
    provider = build_login_provider(settings)

    app = FastAPI(title="Photo Library", version="1.0.0", lifespan=_lifespan)
    app.state.authorized_clients = InMemoryAuthorizedClientService()
    app.state.http_client = httpx.AsyncClient(timeout=settings.http_timeout_seconds)
    app.state.login_providers = {provider.registration_id: provider}

    app.add_middleware(SessionMiddleware, secret_key=settings.session_secret, same_site="lax")

    @app.exception_handler(ApiError)
    async def handle_api_error(_, exc: ApiError) -> JSONResponse:
        return JSONResponse(
            status_code=exc.status_code,
            content=exc.payload.model_dump(mode="json", exclude_none=True),
        )

    @app.exception_handler(LoginRequiredError)
    async def handle_login_required(request: Request, _: LoginRequiredError) -> RedirectResponse:
        return RedirectResponse(str(request.url_for("login")), status_code=status.HTTP_302_FOUND)

    @app.exception_handler(UnauthorizedError)
    async def handle_unauthorized(request: Request, exc: UnauthorizedError) -> RedirectResponse:
        # Never retried: the user re-enters through login once the session is gone.
        logger.warning(
            "bridge.unauthorized registration_id=%s path=%s correlation_id=%s",
            exc.registration_id,
            request.url.path,
            safe_log_identifier(request.headers.get("X-Correlation-Id"), prefix="cid"),
        )
        request.session.clear()
        return RedirectResponse(str(request.url_for("welcome")), status_code=status.HTTP_302_FOUND)

    @app.exception_handler(UpstreamFailureError)
    async def handle_upstream_failure(request: Request, exc: UpstreamFailureError) -> Response:
        logger.warning(
            "request.upstream_failed path=%s status=%s error=%s",
            request.url.path,
            exc.status_code,
            type(exc).__name__,
        )
        return _render_failure(
            request,
            status_code=status.HTTP_502_BAD_GATEWAY,
            message="The photo library is unavailable right now. Please try again later.",
        )

    @app.exception_handler(RequestValidationError)
    async def handle_validation_error(request: Request, exc: RequestValidationError) -> Response:
        route = request.scope.get("route")
        route_path = getattr(route, "path", request.url.path)
        message = _PAGE_VALIDATION_PATHS.get((request.method.upper(), route_path))
        if message is not None:
            return _render_failure(request, status_code=status.HTTP_400_BAD_REQUEST, message=message)

        return await request_validation_exception_handler(request, exc)

    app.include_router(auth_router)
    app.include_router(photos_router)
    app.mount("/images", StaticFiles(directory=STATIC_DIR / "images"), name="images")

    return app
