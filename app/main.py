from __future__ import annotations

import contextlib
import logging
import os

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from app.api.router import api_router
from career.bootstrap import ensure_db_initialized, validate_repo_integrity_once
from config import get_db_path

logger = logging.getLogger(__name__)


@contextlib.asynccontextmanager
async def _lifespan(_app: FastAPI):
    # Schema + event seed once per process; requests only check the memo.
    db_path = get_db_path()
    ensure_db_initialized(db_path)
    validate_repo_integrity_once(db_path)
    logger.info("career DB ready at %s", db_path)
    yield


app = FastAPI(title="Military Career Sim Server", lifespan=_lifespan)

app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


@app.middleware("http")
async def _auth_guard_middleware(request: Request, call_next):
    """Optional admin guard.

    If CAREER_SIM_ADMIN_TOKEN is configured, require it on state-changing API calls.
    """
    required_token = (os.environ.get("CAREER_SIM_ADMIN_TOKEN") or "").strip()
    if not required_token:
        return await call_next(request)

    path = request.url.path or ""
    method = (request.method or "GET").upper()
    if method != "POST" or not path.startswith("/api/"):
        return await call_next(request)

    provided = (request.headers.get("X-Admin-Token") or "").strip()
    if provided != required_token:
        return JSONResponse(status_code=401, content={"detail": "Unauthorized: invalid X-Admin-Token"})

    return await call_next(request)


app.include_router(api_router)
