"""
FastAPI application for the resume-screening forwarding proxy.

Routes:
- OPTIONS/POST on the screening route: CORS preflight and forwarding
- GET on the public object route: serves stored resumes to the workflow
- GET /health
"""

from contextlib import asynccontextmanager
from typing import Optional

import httpx
from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse, Response

from hireflow.core.exceptions import StorageError
from hireflow.core.proxy.forwarder import WebhookForwarder, read_form_entries
from hireflow.data.database import DatabaseManager
from hireflow.services.storage_service import (
    PUBLIC_OBJECT_PREFIX,
    GridFSResumeStorage,
    ResumeStorage,
)
from hireflow.utils.config import AppSettings, get_settings
from hireflow.utils.logger import get_logger

logger = get_logger(__name__)

FORM_CONTENT_TYPES = ("multipart/form-data", "application/x-www-form-urlencoded")


def cors_headers(allowed_headers: str) -> dict[str, str]:
    return {
        "Access-Control-Allow-Origin": "*",
        "Access-Control-Allow-Headers": allowed_headers,
    }


def create_app(
    settings: Optional[AppSettings] = None,
    forwarder: Optional[WebhookForwarder] = None,
    storage: Optional[ResumeStorage] = None,
) -> FastAPI:
    """
    Build the proxy application.

    Collaborators that are not injected are created on startup from
    settings: an httpx client for the webhook and GridFS resume storage.
    """
    settings = settings or get_settings()
    headers = cors_headers(settings.proxy.allowed_headers)

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        http_client: Optional[httpx.AsyncClient] = None
        db_manager: Optional[DatabaseManager] = None

        if app.state.forwarder is None:
            http_client = httpx.AsyncClient(
                timeout=settings.webhook.timeout_seconds, follow_redirects=True
            )
            app.state.forwarder = WebhookForwarder(
                settings.webhook.webhook_url,
                http_client,
                timeout=settings.webhook.timeout_seconds,
            )
        if app.state.storage is None:
            db_manager = DatabaseManager(settings.database)
            app.state.storage = GridFSResumeStorage(
                db_manager.get_resume_bucket(),
                bucket=db_manager.resume_bucket_name,
                public_base_url=settings.proxy.public_base_url,
            )

        logger.info(f"Proxy ready, primary webhook {app.state.forwarder.webhook_url}")
        yield

        if http_client is not None:
            await http_client.aclose()
        if db_manager is not None:
            db_manager.close_all()

    app = FastAPI(title="hireflow resume-screening proxy", version=settings.version, lifespan=lifespan)
    app.state.forwarder = forwarder
    app.state.storage = storage

    @app.options(settings.proxy.route)
    async def screening_preflight() -> Response:
        return Response(status_code=200, headers=headers)

    @app.post(settings.proxy.route)
    async def screening_forward(request: Request) -> JSONResponse:
        try:
            content_type = request.headers.get("content-type", "")
            if not content_type.startswith(FORM_CONTENT_TYPES):
                raise ValueError(f"Expected form data, got '{content_type or 'no content type'}'")

            form = await request.form()
            entries = await read_form_entries(form)
            await form.close()

            result = await request.app.state.forwarder.forward(entries)
            return JSONResponse(result.payload, status_code=result.status_code, headers=headers)
        except Exception as e:
            message = str(e) or e.__class__.__name__
            logger.error(f"Error proxying to n8n: {message}")
            return JSONResponse({"error": message}, status_code=500, headers=headers)

    @app.get(f"{PUBLIC_OBJECT_PREFIX}/{{bucket}}/{{path:path}}")
    async def public_object(bucket: str, path: str) -> Response:
        store: ResumeStorage = app.state.storage
        if store is None or bucket != store.bucket:
            return JSONResponse({"error": "Bucket not found"}, status_code=404, headers=headers)
        try:
            stored = await store.download(path)
        except StorageError as e:
            return JSONResponse({"error": str(e)}, status_code=404, headers=headers)
        return Response(stored.content, media_type=stored.content_type, headers=headers)

    @app.get("/health")
    async def health() -> dict:
        return {"status": "healthy", "webhook": app.state.forwarder is not None}

    return app
