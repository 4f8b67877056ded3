import asyncio
import logging

from fastapi import FastAPI, Depends, File, HTTPException, Response, UploadFile
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import FileResponse

from app import __version__
from app.core.config import settings
from app.core.logging import configure_logging
from app.db.store import RecordStore, StoreError, get_store
from app.schemas import (
    ChatRequest,
    ChatResponse,
    Proposal,
    RecordCandidate,
    SaveRequest,
    SaveResponse,
    UploadResponse,
)
from app.services.proposer import ProposalError, get_proposer
from app.services.ranker import get_ranker
from app.services.uploads import find_upload, save_upload

logger = logging.getLogger(__name__)

# Simple in-memory metrics
_metrics = {
    "requests_total": 0,
    "upload_total": 0,
    "save_total": 0,
    "chat_total": 0,
    "errors_total": 0,
}


def create_app() -> FastAPI:
    configure_logging()
    app = FastAPI(title=settings.app_name, version=__version__)

    # CORS
    if settings.allowed_origins:
        app.add_middleware(
            CORSMiddleware,
            allow_origins=settings.allowed_origins,
            allow_credentials=True,
            allow_methods=["*"],
            allow_headers=["*"],
        )

    @app.get("/healthz")
    async def healthz():
        return {"status": "ok"}

    @app.get("/")
    async def root():
        return {
            "service": settings.app_name,
            "version": __version__,
            "environment": settings.environment,
        }

    @app.post("/api/upload", response_model=UploadResponse)
    async def upload(file: UploadFile | None = File(None), proposer=Depends(get_proposer)):
        """Store the file and ask the completion API for a description and tags to confirm."""
        _metrics["requests_total"] += 1
        _metrics["upload_total"] += 1
        if file is None:
            raise HTTPException(status_code=400, detail="No file")
        data = await file.read()
        try:
            stored = await asyncio.to_thread(save_upload, file.filename, data, file.content_type)
        except OSError as e:
            _metrics["errors_total"] += 1
            logger.exception("Saving upload %s failed", file.filename)
            raise HTTPException(status_code=500, detail=f"upload failed: {e}") from e
        try:
            description, tags = await proposer.propose(stored)
        except ProposalError as e:
            _metrics["errors_total"] += 1
            raise HTTPException(status_code=502, detail=f"proposal failed: {e}") from e
        return {"proposal": Proposal(description=description, tags=tags, path=stored.public_path)}

    @app.get(settings.uploads_url_prefix.rstrip("/") + "/{stored_name}")
    async def uploaded_file(stored_name: str):
        # Looks in the tmp fallback too, so proposals saved there stay reachable
        path = await asyncio.to_thread(find_upload, stored_name)
        if path is None:
            raise HTTPException(status_code=404, detail="Not found")
        return FileResponse(path)

    @app.post("/api/save", response_model=SaveResponse)
    async def save(payload: SaveRequest, store: RecordStore = Depends(get_store)):
        """Append the user-confirmed description and tags as a new record."""
        _metrics["requests_total"] += 1
        _metrics["save_total"] += 1
        candidate = RecordCandidate(**payload.model_dump())
        try:
            saved = await store.append_entry(candidate)
        except StoreError as e:
            _metrics["errors_total"] += 1
            logger.exception("Saving record failed")
            raise HTTPException(status_code=500, detail=str(e)) from e
        return {"ok": True, "saved": saved}

    @app.post("/api/chat", response_model=ChatResponse)
    async def chat(payload: ChatRequest, store: RecordStore = Depends(get_store)):
        """Rank every stored record against the message and return the best hits."""
        _metrics["requests_total"] += 1
        _metrics["chat_total"] += 1
        if not payload.message:
            raise HTTPException(status_code=400, detail="message required")
        try:
            records = await store.read_all()
        except StoreError as e:
            _metrics["errors_total"] += 1
            logger.exception("Reading records failed")
            raise HTTPException(status_code=500, detail=str(e)) from e
        k = payload.top_k or settings.default_top_k
        hits = get_ranker().top_k(payload.message, records, k=k)
        logger.debug("Query %r matched %d of %d records", payload.message, len(hits), len(records))
        return {"hits": hits}

    @app.get("/ready")
    async def ready() -> dict:
        # Ready once the tokenizer resolves and the data file (if any) parses
        try:
            get_ranker()
            await get_store().read_all()
            return {"ready": True}
        except (StoreError, ValueError):
            return {"ready": False}

    @app.get("/metrics")
    async def metrics() -> Response:
        lines = [
            "# HELP service_requests_total Total HTTP requests.",
            "# TYPE service_requests_total counter",
            f"service_requests_total {_metrics['requests_total']}",
            "# HELP api_requests_total Total API requests by endpoint.",
            "# TYPE api_requests_total counter",
            f"api_requests_total{{endpoint=\"upload\"}} {_metrics['upload_total']}",
            f"api_requests_total{{endpoint=\"save\"}} {_metrics['save_total']}",
            f"api_requests_total{{endpoint=\"chat\"}} {_metrics['chat_total']}",
            "# HELP api_errors_total Total failed API requests.",
            "# TYPE api_errors_total counter",
            f"api_errors_total {_metrics['errors_total']}",
        ]
        return Response("\n".join(lines) + "\n", media_type="text/plain; version=0.0.4")

    return app


app = create_app()
