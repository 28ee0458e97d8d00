from __future__ import annotations

import asyncio
import logging
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, Dict, Optional
from uuid import uuid4

from fastapi import APIRouter, FastAPI, HTTPException, Request
from fastapi import WebSocket, WebSocketDisconnect
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from fastapi.staticfiles import StaticFiles

from src.core.deps import user_from_token
from src.core.logging import configure_logging, request_context
from src.core.settings import get_app_settings
from src.db.run_migrations import main as run_alembic
from src.db.seed import seed_all
from src.db.session import dispose_engine, session_scope
from src.schemas.common import ErrorInfo, ErrorResponse, MessageResponse
from src.services.base import ServiceError
from src.services.notifications import run_low_stock_monitor
from src.services.realtime import broadcast_manager

# Routers
from src.api.routes.auth import router as auth_router
from src.api.routes.users import router as users_router
from src.api.routes.permissions import router as permissions_router
# Domain routers
from src.api.routes.accounts import customers_router, parties_router
from src.api.routes.audit import router as audit_router
from src.api.routes.catalog import router as catalog_router
from src.api.routes.dashboard import router as dashboard_router
from src.api.routes.finance import assets_router, expenses_router
from src.api.routes.inventory import router as inventory_router
from src.api.routes.ledger import router as ledger_router
from src.api.routes.notifications import router as notifications_router
from src.api.routes.orders import public_router as public_orders_router
from src.api.routes.orders import router as orders_router
from src.api.routes.procurement import router as procurement_router
from src.api.routes.production import router as production_router
from src.api.routes.reports import router as reports_router
from src.api.routes.settings import router as settings_router
from src.api.routes.staff import router as staff_router
from src.api.routes.uploads import router as uploads_router

settings = get_app_settings()

# Configure structured logging once at import
configure_logging(settings.LOG_LEVEL, settings.SQL_LOG_LEVEL)
logger = logging.getLogger(__name__)

openapi_tags = [
    {"name": "Health", "description": "Liveness and readiness probes."},
    {"name": "Auth", "description": "Login, token refresh and profile endpoints."},
    {"name": "Users", "description": "User administration endpoints."},
    {"name": "Permissions", "description": "Role grants and per-user permission overrides."},
    {"name": "Dashboard", "description": "Headline figures and sales analytics."},
    {"name": "Catalog", "description": "Products, categories, recipes and units of measure."},
    {"name": "Inventory", "description": "Inventory items, categories and stock movements."},
    {"name": "Orders", "description": "Staff order entry."},
    {"name": "Public", "description": "Unauthenticated storefront endpoints."},
    {"name": "Production", "description": "Production schedule."},
    {"name": "Customers", "description": "Customer accounts."},
    {"name": "Parties", "description": "Suppliers and creditors."},
    {"name": "Ledger", "description": "Customer and party ledgers with running balances."},
    {"name": "Purchases", "description": "Supplier purchases that restock inventory."},
    {"name": "Expenses", "description": "Business expenses."},
    {"name": "Assets", "description": "Fixed assets register."},
    {"name": "Staff", "description": "Employees, attendance, payroll, leave and shifts."},
    {"name": "Settings", "description": "Key/value application settings."},
    {"name": "Notifications", "description": "Per-user notifications and delivery rules."},
    {"name": "Audit", "description": "Audit trail and login history."},
    {"name": "Reports", "description": "Exportable business reports (CSV/Excel/PDF)."},
    {"name": "Uploads", "description": "Image uploads."},
    {
        "name": "WebSocket",
        "description": "WebSocket usage, endpoints, and connection details.",
    },
]

app = FastAPI(
    title=settings.APP_NAME,
    description=settings.APP_DESCRIPTION,
    version=settings.APP_VERSION,
    openapi_tags=openapi_tags,
)

# CORS - avoid wildcard with credentials
cors_allow_credentials = settings.CORS_ALLOW_CREDENTIALS
if settings.CORS_ORIGINS == ["*"] and cors_allow_credentials:
    logger.warning("CORS_ALLOW_CREDENTIALS=True with '*' origins is not permitted; disabling credentials.")
    cors_allow_credentials = False

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.CORS_ORIGINS,
    allow_credentials=cors_allow_credentials,
    allow_methods=settings.CORS_ALLOW_METHODS,
    allow_headers=settings.CORS_ALLOW_HEADERS,
)


@app.middleware("http")
async def request_context_middleware(request: Request, call_next):
    """
    Enrich request context with correlation id, client ip and user agent for
    logging, audit records and error responses.
    Adds 'X-Correlation-ID' to every response.
    """
    corr = request.headers.get("X-Correlation-ID") or request.headers.get("X-Request-ID") or str(uuid4())
    forwarded = request.headers.get("X-Forwarded-For")
    ip = forwarded.split(",")[0].strip() if forwarded else (request.client.host if request.client else None)
    request.state.correlation_id = corr

    with request_context(corr, client_ip=ip, user_agent=request.headers.get("User-Agent")):
        logger.info("Incoming request %s %s", request.method, request.url.path)
        response = await call_next(request)
    response.headers["X-Correlation-ID"] = corr
    return response


def _build_error_response(
    request: Request,
    status_code: int,
    error_type: str,
    message: str,
    details: Any | None = None,
    headers: Optional[Dict[str, str]] = None,
) -> JSONResponse:
    """Build a standardized ErrorResponse JSONResponse."""
    ts = datetime.now(tz=timezone.utc)
    corr = getattr(request.state, "correlation_id", None)
    err = ErrorResponse(
        status=status_code,
        error=ErrorInfo(type=error_type, message=message, details=details),
        correlation_id=corr,
        path=request.url.path,
        method=request.method,
        timestamp=ts,
    )
    return JSONResponse(status_code=status_code, content=err.model_dump(mode="json"), headers=headers)


@app.exception_handler(HTTPException)
async def http_exception_handler(request: Request, exc: HTTPException):
    """
    Global handler for HTTPException to produce a standardized error envelope.
    """
    detail = exc.detail if isinstance(exc.detail, str) else "HTTP Error"
    return _build_error_response(
        request=request,
        status_code=exc.status_code,
        error_type="http_error",
        message=str(detail),
        details=None if isinstance(exc.detail, str) else exc.detail,
        headers=getattr(exc, "headers", None),
    )


@app.exception_handler(ServiceError)
async def service_exception_handler(request: Request, exc: ServiceError):
    """
    Map domain errors raised by services (not found, business rule, conflict) to the envelope.
    """
    if exc.status_code >= 500:
        logger.error("Service error: %s", exc.message)
    return _build_error_response(
        request=request,
        status_code=exc.status_code,
        error_type=exc.error_type,
        message=exc.message,
        details=exc.details,
    )


@app.exception_handler(RequestValidationError)
async def validation_exception_handler(request: Request, exc: RequestValidationError):
    """
    Global handler for request validation errors with a standard structure.
    """
    return _build_error_response(
        request=request,
        status_code=422,
        error_type="validation_error",
        message="Request validation failed",
        details=_validation_details(exc),
    )


def _validation_details(exc: RequestValidationError) -> list:
    """Validation errors with any non-JSON context (e.g. exception objects) stringified."""
    errors = []
    for err in exc.errors():
        item = dict(err)
        if "ctx" in item:
            item["ctx"] = {k: str(v) for k, v in item["ctx"].items()}
        errors.append(item)
    return errors


@app.exception_handler(Exception)
async def unhandled_exception_handler(request: Request, exc: Exception):
    """
    Catch-all handler to avoid leaking stack traces and to return a structured error.
    """
    logger.exception("Unhandled error processing request")
    return _build_error_response(
        request=request,
        status_code=500,
        error_type="internal_error",
        message="An unexpected error occurred",
        details=None,
    )


@app.on_event("startup")
async def on_startup() -> None:
    """
    Run migrations, optional seeding and the low stock monitor on service startup.

    This ensures the database schema is up to date. Seeding is opt-in via settings.
    """
    if settings.RUN_MIGRATIONS_ON_STARTUP:
        try:
            logger.info("Running Alembic migrations: upgrade head")
            # env.py drives its own event loop, so run it off the server's loop.
            await asyncio.to_thread(run_alembic, ["upgrade", "head"])
            logger.info("Migrations completed.")
        except Exception as exc:
            logger.exception("Migration step failed: %s", exc)
            # Do not crash the app in case of transient DB issues; rely on retries or later readiness probes.

    if settings.AUTO_SEED:
        try:
            logger.info("Running database seeding...")
            await seed_all()
            logger.info("Seeding completed.")
        except Exception as exc:
            logger.exception("Seeding step failed: %s", exc)

    app.state.low_stock_task = None
    if settings.LOW_STOCK_CHECK_INTERVAL_SECONDS > 0:
        app.state.low_stock_task = asyncio.create_task(
            run_low_stock_monitor(settings.LOW_STOCK_CHECK_INTERVAL_SECONDS)
        )


@app.on_event("shutdown")
async def on_shutdown() -> None:
    """Stop background tasks and close database connections."""
    task = getattr(app.state, "low_stock_task", None)
    if task is not None:
        task.cancel()
        try:
            await task
        except asyncio.CancelledError:
            pass
    await dispose_engine()


# Uploaded images are served straight from the upload directory.
upload_dir = Path(settings.UPLOAD_DIR)
upload_dir.mkdir(parents=True, exist_ok=True)
app.mount("/uploads", StaticFiles(directory=str(upload_dir)), name="uploads")

# Build API v1 router and include sub-routers
api_v1 = APIRouter(prefix="/api/v1")

# PUBLIC_INTERFACE
@api_v1.get(
    "/health",
    response_model=MessageResponse,
    summary="Health Check",
    tags=["Health"],
)
def health_check() -> MessageResponse:
    """
    Basic liveness health check endpoint.

    Returns:
        MessageResponse: Simple confirmation that the service is running.
    """
    return MessageResponse(message="Healthy")


# PUBLIC_INTERFACE
@api_v1.get(
    "/websocket-info",
    response_model=Dict[str, Any],
    summary="WebSocket Usage Information",
    description="Connection details for the WebSocket endpoints.",
    tags=["WebSocket"],
)
def websocket_info() -> Dict[str, Any]:
    """
    Describe how to connect to WebSocket endpoints in this service.

    Returns:
        JSON object with usage notes and endpoints list describing query params and message format.
    """
    return {
        "usage": (
            "Connect with a valid access token as a 'token' query parameter. "
            "Message format is JSON with fields: { type: string, payload: object, at: ISO-8601, user_id?: int }. "
            "Send the text 'ping' to receive 'pong'."
        ),
        "security": {
            "token": "Access JWT issued by /api/v1/auth/login. Invalid tokens are closed with code 4401.",
        },
        "endpoints": [
            {
                "path": "/ws/notifications",
                "summary": "Notifications for the authenticated user (server push).",
                "query": ["token"],
                "messages": {"server_to_client": ["notification.created"]},
            },
            {
                "path": "/ws/dashboard",
                "summary": "Change notices for dashboard widgets (server push).",
                "query": ["token"],
                "messages": {
                    "server_to_client": [
                        "dashboard.order.created",
                        "dashboard.order.updated",
                        "dashboard.inventory.changed",
                        "dashboard.production.created",
                        "dashboard.production.updated",
                        "dashboard.production.deleted",
                    ]
                },
            },
        ],
        "notes": "WebSocket endpoints are not represented in OpenAPI schema; refer to this endpoint for usage.",
    }


# Include all routers under /api/v1
api_v1.include_router(auth_router)
api_v1.include_router(users_router)
api_v1.include_router(permissions_router)
api_v1.include_router(dashboard_router)
api_v1.include_router(catalog_router)
api_v1.include_router(inventory_router)
api_v1.include_router(orders_router)
api_v1.include_router(public_orders_router)
api_v1.include_router(production_router)
api_v1.include_router(customers_router)
api_v1.include_router(parties_router)
api_v1.include_router(ledger_router)
api_v1.include_router(procurement_router)
api_v1.include_router(expenses_router)
api_v1.include_router(assets_router)
api_v1.include_router(staff_router)
api_v1.include_router(settings_router)
api_v1.include_router(notifications_router)
api_v1.include_router(audit_router)
api_v1.include_router(reports_router)
api_v1.include_router(uploads_router)

# Attach api_v1 to app
app.include_router(api_v1)


async def _authenticate_ws(websocket: WebSocket) -> Optional[int]:
    """
    Validate the 'token' query parameter of an accepted WebSocket.

    Returns the user id, or None after closing the socket with code 4401.
    """
    token = websocket.query_params.get("token")
    try:
        async with session_scope() as session:
            user = await user_from_token(session, token)
    except HTTPException:
        await websocket.close(code=4401)
        return None
    if not user.is_active:
        await websocket.close(code=4401)
        return None
    return user.id


async def _serve_topic(websocket: WebSocket, topic: str) -> None:
    """Keep a subscribed socket open, answering pings, until the client leaves."""
    await broadcast_manager.connect(topic, websocket)
    try:
        while True:
            msg = await websocket.receive_text()
            if msg and msg.lower() == "ping":
                await websocket.send_text("pong")
            # other client messages are ignored
    except WebSocketDisconnect:
        await broadcast_manager.disconnect(topic, websocket)
    except Exception:
        logger.exception("Error on websocket connection for topic %s", topic)
        await broadcast_manager.disconnect(topic, websocket)
        await websocket.close()


# PUBLIC_INTERFACE
@app.websocket("/ws/notifications")
async def ws_notifications(websocket: WebSocket):
    """
    WebSocket endpoint pushing new notifications to their recipient.

    Security:
      - Query param 'token' must be a valid access JWT.
    Messages:
      - Server -> Client: type='notification.created' payload=notification
      - Client -> Server: optional 'ping' to keepalive; other messages ignored.
    """
    await websocket.accept()
    user_id = await _authenticate_ws(websocket)
    if user_id is None:
        return
    await _serve_topic(websocket, broadcast_manager.notification_topic(user_id))


# PUBLIC_INTERFACE
@app.websocket("/ws/dashboard")
async def ws_dashboard(websocket: WebSocket):
    """
    WebSocket endpoint telling dashboards when orders, stock or production change.

    Clients refetch the affected widgets over REST when an event arrives.
    """
    await websocket.accept()
    user_id = await _authenticate_ws(websocket)
    if user_id is None:
        return
    await _serve_topic(websocket, broadcast_manager.dashboard_topic())
