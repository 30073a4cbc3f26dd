"""
Web Microservice

Responsibilities:
- Login / registration / logout pages
- Items CRUD page
- Session cookie bridging between the browser and the hosted auth service

Every page handler builds a fresh bridged handle for its request and attaches
the handle's accumulated Set-Cookie headers to whatever response it returns.
"""

from fastapi import FastAPI, Depends, Request, status
from fastapi.responses import HTMLResponse, RedirectResponse, Response
import uvicorn
import logging
import sys
from contextlib import asynccontextmanager
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, Dict, Optional

import httpx
from jinja2 import Environment, FileSystemLoader, select_autoescape

from core.config import ConfigurationError, WebServiceConfig
from core.config_manager import ConfigManager
from core.hosted import AuthSessionMissingError, HostedServiceError
from core.logger import setup_service_logger
from core.session_bridge import BridgedHandle

from .factory import create_auth_service, create_bridged_handle, create_items_service
from .models import CredentialsForm, PageMeta
from .protocols import WebServiceError
from .routes_registry import SERVICE_METADATA, get_all_routes, get_routes_summary

logger = logging.getLogger("web_service")

TEMPLATES_DIR = Path(__file__).parent / "templates"

APP_NAME = "FastAPI Supabase App"

PAGE_META = {
    "login": PageMeta(title=f"Login - {APP_NAME}", description="Login to your account"),
    "register": PageMeta(title=f"Register - {APP_NAME}", description="Create an account"),
    "home": PageMeta(title=f"Home - {APP_NAME}", description="Welcome to the home page"),
    "crud": PageMeta(title=f"Items - {APP_NAME}", description="Manage your items"),
    "error": PageMeta(title=f"Error - {APP_NAME}", description="Something went wrong"),
}


def _create_jinja_env() -> Environment:
    """Create a Jinja2 environment for page templates."""
    return Environment(
        loader=FileSystemLoader(str(TEMPLATES_DIR)),
        autoescape=select_autoescape(["html"]),
    )


# ================================
# Service core
# ================================

class WebMicroservice:
    """Process-wide state: configuration, shared HTTP client, templates"""

    def __init__(self, config: WebServiceConfig, http_client: Optional[httpx.AsyncClient] = None):
        self.config = config
        self.http_client = http_client
        self._owns_client = http_client is None
        self.jinja_env = _create_jinja_env()

    async def initialize(self):
        logger.info("Initializing web microservice...")
        if self.http_client is None:
            self.http_client = httpx.AsyncClient(timeout=self.config.hosted.http_timeout)
        logger.info(f"Hosted service endpoint: {self.config.hosted.base_url}")

    async def shutdown(self):
        if self._owns_client and self.http_client is not None:
            await self.http_client.aclose()
            self.http_client = None
        logger.info("Web microservice shutdown completed")

    def render(
        self,
        bridged: BridgedHandle,
        template_name: str,
        context: Optional[Dict[str, Any]] = None,
        status_code: int = status.HTTP_200_OK,
    ) -> HTMLResponse:
        """Render a page and attach the request's session cookies"""
        page = template_name.rsplit(".", 1)[0]
        ctx = {
            "app_name": APP_NAME,
            "meta": PAGE_META.get(page),
            **(context or {}),
        }
        html = self.jinja_env.get_template(template_name).render(**ctx)
        return bridged.apply_to(HTMLResponse(content=html, status_code=status_code))

    @staticmethod
    def redirect(
        bridged: BridgedHandle,
        url: str,
        status_code: int = status.HTTP_302_FOUND,
    ) -> RedirectResponse:
        """Redirect and attach the request's session cookies"""
        return bridged.apply_to(RedirectResponse(url=url, status_code=status_code))

    def error_page(self, bridged: Optional[BridgedHandle]) -> HTMLResponse:
        """500 page; carries the request's cookie updates unless already sent"""
        html = self.jinja_env.get_template("error.html").render(
            app_name=APP_NAME, meta=PAGE_META["error"], error="An unknown error occurred"
        )
        response = HTMLResponse(content=html, status_code=status.HTTP_500_INTERNAL_SERVER_ERROR)
        if bridged is not None and not bridged.response_headers.finalized:
            bridged.apply_to(response)
        return response


# ================================
# Dependency Injection
# ================================

def get_web_service(request: Request) -> WebMicroservice:
    return request.app.state.web_service


async def get_bridged_handle(
    request: Request,
    web_service: WebMicroservice = Depends(get_web_service),
) -> BridgedHandle:
    """Fresh bridge per request; never shared"""
    bridged = create_bridged_handle(request, web_service.config, web_service.http_client)
    request.state.bridged = bridged
    return bridged


async def _form_dict(request: Request) -> Dict[str, str]:
    form = await request.form()
    return {key: value for key, value in form.items() if isinstance(value, str)}


# ================================
# Application
# ================================

def create_app(
    config: Optional[WebServiceConfig] = None,
    http_client: Optional[httpx.AsyncClient] = None,
) -> FastAPI:
    """
    Build the FastAPI application.

    Args:
        config: Validated configuration (loaded from the environment if omitted)
        http_client: Shared HTTP client (created in lifespan if omitted)

    Raises:
        ConfigurationError: If the hosted service endpoint or key is missing
    """
    if config is None:
        config = ConfigManager("web_service").get_service_config()
    else:
        config.hosted.validate()

    web_service = WebMicroservice(config, http_client)

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        """Application lifecycle management"""
        await web_service.initialize()
        yield
        await web_service.shutdown()

    app = FastAPI(
        title="Web Microservice",
        description="Server-rendered auth and items pages backed by a hosted auth/database service",
        version=SERVICE_METADATA["version"],
        lifespan=lifespan,
    )
    app.state.web_service = web_service

    @app.middleware("http")
    async def deliver_cookies_on_error(request: Request, call_next):
        """Unhandled errors still send the cookie updates made so far"""
        try:
            return await call_next(request)
        except Exception as e:
            logger.error(f"Unhandled error on {request.method} {request.url.path}: {e}", exc_info=True)
            return web_service.error_page(getattr(request.state, "bridged", None))

    # Health Check Endpoints

    @app.get("/health")
    async def health_check():
        """Service health check"""
        return {
            "status": "healthy",
            "service": config.service_name,
            "port": config.service_port,
            "version": SERVICE_METADATA["version"],
            "capabilities": SERVICE_METADATA["capabilities"],
            "timestamp": datetime.now(tz=timezone.utc).isoformat(),
        }

    @app.get("/api/v1/web/info")
    async def get_web_info():
        """Web service information"""
        return {
            "service": config.service_name,
            "version": SERVICE_METADATA["version"],
            "routes": get_all_routes(),
            "summary": get_routes_summary(),
        }

    # Index

    @app.get("/", response_model=None)
    async def index(bridged: BridgedHandle = Depends(get_bridged_handle)) -> Response:
        """Send signed-in users home, everyone else to login"""
        user = await create_auth_service(bridged).current_user()
        return web_service.redirect(bridged, "/home" if user else "/login")

    # Login

    @app.get("/login", response_model=None)
    async def login_page(bridged: BridgedHandle = Depends(get_bridged_handle)) -> Response:
        """Show login form or redirect if already signed in"""
        user = await create_auth_service(bridged).current_user()
        if user:
            return web_service.redirect(bridged, "/home")
        return web_service.render(bridged, "login.html", {"error": None})

    @app.post("/login", response_model=None)
    async def login_submit(
        request: Request,
        bridged: BridgedHandle = Depends(get_bridged_handle),
    ) -> Response:
        """Handle login form submission"""
        form = CredentialsForm(**await _form_dict(request))
        try:
            await create_auth_service(bridged).sign_in(form)
        except (WebServiceError, HostedServiceError) as e:
            logger.info(f"Login failed for {form.email}: {e.message}")
            return web_service.render(bridged, "login.html", {"error": e.message, "email": form.email})
        except Exception as e:
            logger.error(f"Login failed: {e}", exc_info=True)
            return web_service.render(bridged, "login.html", {"error": "An unknown error occurred"})
        return web_service.redirect(bridged, "/home", status.HTTP_303_SEE_OTHER)

    # Register

    @app.get("/register", response_model=None)
    async def register_page(bridged: BridgedHandle = Depends(get_bridged_handle)) -> Response:
        """Show registration form or redirect if already signed in"""
        user = await create_auth_service(bridged).current_user()
        if user:
            return web_service.redirect(bridged, "/home")
        return web_service.render(bridged, "register.html", {"error": None, "message": None})

    @app.post("/register", response_model=None)
    async def register_submit(
        request: Request,
        bridged: BridgedHandle = Depends(get_bridged_handle),
    ) -> Response:
        """Handle registration form submission"""
        form = CredentialsForm(**await _form_dict(request))
        try:
            result = await create_auth_service(bridged).register(form)
        except (WebServiceError, HostedServiceError) as e:
            logger.info(f"Registration failed for {form.email}: {e.message}")
            return web_service.render(
                bridged, "register.html", {"error": e.message, "message": None, "email": form.email}
            )
        except Exception as e:
            logger.error(f"Registration failed: {e}", exc_info=True)
            return web_service.render(
                bridged, "register.html", {"error": "An unknown error occurred", "message": None}
            )

        if result.session is not None:
            return web_service.redirect(bridged, "/home", status.HTTP_303_SEE_OTHER)
        return web_service.render(
            bridged,
            "register.html",
            {"error": None, "message": f"Check {form.email} to confirm your account, then log in."},
        )

    # Home

    @app.get("/home", response_model=None)
    async def home_page(bridged: BridgedHandle = Depends(get_bridged_handle)) -> Response:
        """Home page for signed-in users"""
        user = await create_auth_service(bridged).current_user()
        if user is None:
            return web_service.redirect(bridged, "/login")
        return web_service.render(bridged, "home.html", {"user": user, "error": None})

    @app.post("/home", response_model=None)
    async def logout(bridged: BridgedHandle = Depends(get_bridged_handle)) -> Response:
        """Sign out and go back to login"""
        try:
            await create_auth_service(bridged).sign_out()
        except Exception as e:
            logger.error(f"Logout failed: {e}")
            return web_service.render(bridged, "home.html", {"user": None, "error": "Failed to logout"})
        return web_service.redirect(bridged, "/login", status.HTTP_303_SEE_OTHER)

    # Items CRUD

    async def _render_crud(
        bridged: BridgedHandle,
        error: Optional[str] = None,
        edit_id: Optional[str] = None,
    ) -> Response:
        items_service = create_items_service(bridged, config)
        items = []
        try:
            items = await items_service.list_items()
        except HostedServiceError as e:
            logger.warning(f"Listing items failed: {e.message}")
            error = error or e.message
        editing = items_service.find_item(items, edit_id)
        return web_service.render(
            bridged, "crud.html", {"items": items, "error": error, "editing": editing}
        )

    @app.get("/crud", response_model=None)
    async def crud_page(
        request: Request,
        bridged: BridgedHandle = Depends(get_bridged_handle),
    ) -> Response:
        """Items list; ?edit=<id> opens the edit form"""
        try:
            await create_auth_service(bridged).require_user()
        except AuthSessionMissingError:
            return web_service.redirect(bridged, "/login")
        return await _render_crud(bridged, edit_id=request.query_params.get("edit"))

    @app.post("/crud", response_model=None)
    async def crud_action(
        request: Request,
        bridged: BridgedHandle = Depends(get_bridged_handle),
    ) -> Response:
        """Add, edit or delete an item"""
        try:
            await create_auth_service(bridged).require_user()
        except AuthSessionMissingError:
            return web_service.redirect(bridged, "/login", status.HTTP_303_SEE_OTHER)
        form_data = await _form_dict(request)
        result = await create_items_service(bridged, config).handle_action(form_data)
        # Keep the edit form open when an edit fails
        edit_id = form_data.get("id") if result.error and form_data.get("actionType") == "editItem" else None
        return await _render_crud(bridged, error=result.error, edit_id=edit_id)

    return app


# Startup Configuration

if __name__ == "__main__":
    try:
        service_config = ConfigManager("web_service").get_service_config()
    except ConfigurationError as e:
        logging.basicConfig(level=logging.ERROR)
        logger.critical(f"Cannot start web service: {e}")
        sys.exit(1)

    setup_service_logger("web_service", service_config.logging)
    uvicorn.run(
        create_app(service_config),
        host=service_config.service_host,
        port=service_config.service_port,
        log_level=service_config.log_level.lower(),
    )
