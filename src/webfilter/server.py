"""HTTP surface of the master: decision endpoint and admin pages."""

from __future__ import annotations

import logging
from pathlib import Path

from fastapi import APIRouter, FastAPI, Form, Request
from fastapi.responses import PlainTextResponse, RedirectResponse
from fastapi.templating import Jinja2Templates
from pydantic import BaseModel

from . import __version__
from .exceptions import ClientInputError
from .registry import Registry
from .service import DecisionService
from .store import HostStore

logger = logging.getLogger(__name__)

templates = Jinja2Templates(directory=str(Path(__file__).parent / "templates"))


class ValidateRequest(BaseModel):
    host: str


class ValidateResponse(BaseModel):
    ok: bool


# =============================================================================
# DECISION ENDPOINT
# =============================================================================

rpc_router = APIRouter(prefix="/rpc", tags=["rpc"])


@rpc_router.post("/validate", response_model=ValidateResponse)
def validate(body: ValidateRequest, request: Request):
    service: DecisionService = request.app.state.service
    return {"ok": service.validate(body.host)}


# =============================================================================
# ADMIN SURFACE
# =============================================================================

admin_router = APIRouter(prefix="/admin", tags=["admin"])


def _registry(request: Request) -> Registry:
    return request.app.state.service.registry


def _back_to_admin() -> RedirectResponse:
    return RedirectResponse(url="/admin/", status_code=302)


@admin_router.get("/")
def admin_index(request: Request):
    hosts = _registry(request).snapshot()
    return templates.TemplateResponse(
        request,
        "admin.html",
        {"hosts": hosts, "version": __version__},
    )


@admin_router.get("/api/hosts")
def admin_hosts(request: Request):
    return [h.to_dict() for h in _registry(request).snapshot()]


@admin_router.post("/add")
def admin_add(request: Request, suffix: str = Form("")):
    _registry(request).add(suffix.strip())
    return _back_to_admin()


@admin_router.post("/open")
def admin_open(request: Request, suffix: str = Form(""), mins: str = Form("")):
    _registry(request).open(suffix.strip(), mins)
    return _back_to_admin()


@admin_router.post("/close")
def admin_close(request: Request, suffix: str = Form("")):
    _registry(request).close(suffix.strip())
    return _back_to_admin()


# =============================================================================
# APP FACTORY
# =============================================================================


def create_app(service: DecisionService) -> FastAPI:
    """
    Build the master application around a decision service.

    Args:
        service: Service owning the registry all routes operate on

    Returns:
        FastAPI application
    """
    app = FastAPI(title="webfilter master", version=__version__)
    app.state.service = service
    app.include_router(rpc_router)
    app.include_router(admin_router)

    @app.exception_handler(ClientInputError)
    async def client_input_error(request: Request, exc: ClientInputError):
        logger.warning(f"Rejected {request.url.path}: {exc}")
        return PlainTextResponse(str(exc), status_code=400)

    @app.get("/", include_in_schema=False)
    def root():
        return _back_to_admin()

    return app


def build_service(state_file: Path | str) -> DecisionService:
    """Create a service whose registry is loaded from state_file."""
    registry = Registry(HostStore(state_file))
    registry.load()
    return DecisionService(registry)


def serve(addr: str, state_file: Path | str) -> None:
    """
    Run the master until interrupted.

    Args:
        addr: Listen address (host:port, empty host for all interfaces)
        state_file: Path of the persisted host list
    """
    import uvicorn

    from .config import parse_addr

    host, port = parse_addr(addr)
    app = create_app(build_service(state_file))
    logger.info(f"Listening on {host}:{port}")
    # Keep the logging configured by the CLI instead of uvicorn's defaults
    uvicorn.run(app, host=host, port=port, log_config=None)
