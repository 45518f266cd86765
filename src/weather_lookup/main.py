from __future__ import annotations

import logging
from contextlib import asynccontextmanager
from datetime import datetime, timezone
from pathlib import Path

from fastapi import FastAPI, Request
from fastapi.responses import HTMLResponse, JSONResponse
from fastapi.staticfiles import StaticFiles
from fastapi.templating import Jinja2Templates

from .display import DisplayState, error_message_for_status, run_lookup
from .log_setup import configure_logging
from .lookup.service import LookupService, WeatherLookupError, build_lookup_service
from .scheduler import build_scheduler
from .settings import AppSettings, load_settings

LOGGER = logging.getLogger(__name__)

BASE_DIR = Path(__file__).resolve().parent
WEB_DIR = BASE_DIR / "web"
TEMPLATES_DIR = WEB_DIR / "templates"
STATIC_DIR = WEB_DIR / "static"

templates = Jinja2Templates(directory=str(TEMPLATES_DIR))


def _get_settings(request: Request) -> AppSettings:
    return request.app.state.settings


def _get_service(request: Request) -> LookupService:
    return request.app.state.lookup_service


def _error_response(status_code: int) -> JSONResponse:
    return JSONResponse({"error": error_message_for_status(status_code)}, status_code=status_code)


def create_app(
    settings: AppSettings | None = None,
    service: LookupService | None = None,
    *,
    start_scheduler: bool = True,
) -> FastAPI:
    @asynccontextmanager
    async def lifespan(application: FastAPI):
        app_settings = settings or load_settings()
        configure_logging(app_settings.env.weather_log_level)
        lookup_service = service or build_lookup_service(app_settings)

        scheduler = build_scheduler(app_settings, lookup_service.cache)
        if start_scheduler:
            scheduler.start()

        application.state.settings = app_settings
        application.state.lookup_service = lookup_service
        application.state.scheduler = scheduler
        application.state.started_at_utc = datetime.now(timezone.utc)
        LOGGER.info(
            "Weather lookup started (env=%s, providers=%s)",
            app_settings.env.weather_env,
            ",".join(adapter.name for adapter in lookup_service.adapters),
        )

        try:
            yield
        finally:
            if scheduler.running:
                scheduler.shutdown(wait=False)

    application = FastAPI(title="Weather Lookup", version="0.1.0", lifespan=lifespan)
    application.mount("/static", StaticFiles(directory=str(STATIC_DIR)), name="static")

    @application.exception_handler(Exception)
    async def unexpected_failure(request: Request, exc: Exception) -> JSONResponse:
        LOGGER.error("Unhandled error for %s %s", request.method, request.url.path, exc_info=exc)
        return _error_response(500)

    @application.get("/", response_class=HTMLResponse)
    async def index_page(request: Request) -> HTMLResponse:
        current_settings = _get_settings(request)
        return templates.TemplateResponse(
            request,
            "index.html",
            {
                "title": current_settings.yaml.ui.title,
                **DisplayState().to_context(),
            },
        )

    @application.get("/partials/weather", response_class=HTMLResponse)
    def partial_weather(request: Request, city: str = "") -> HTMLResponse:
        display = run_lookup(_get_service(request), city)
        return templates.TemplateResponse(
            request,
            "components/weather_result.html",
            display.to_context(),
        )

    @application.get("/weather", response_class=JSONResponse)
    def weather(request: Request, city: str = "") -> JSONResponse:
        try:
            snapshot = _get_service(request).get_weather(city)
        except WeatherLookupError as exc:
            return _error_response(exc.status_code)
        return JSONResponse(snapshot.model_dump(mode="json", by_alias=True))

    @application.get("/health", response_class=JSONResponse)
    async def health(request: Request) -> JSONResponse:
        current_settings = _get_settings(request)
        lookup_service = _get_service(request)
        return JSONResponse(
            {
                "status": "ok",
                "service": "weather-lookup",
                "environment": current_settings.env.weather_env,
                "providers": [
                    adapter.name for adapter in lookup_service.adapters if adapter.enabled
                ],
                "cache_entries": len(lookup_service.cache),
                "scheduler_running": request.app.state.scheduler.running,
                "timestamp_utc": datetime.now(timezone.utc).isoformat(),
            }
        )

    return application


app = create_app()
