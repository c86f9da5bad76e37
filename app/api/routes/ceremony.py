from __future__ import annotations

import asyncio
import logging
from typing import Optional

from fastapi import APIRouter, Header, HTTPException

from app.services.career_facade import _career_error_response, _require_profile_id
from career.errors import CareerError
from config import get_db_path

router = APIRouter()
logger = logging.getLogger(__name__)


@router.get("/api/ceremony")
async def api_ceremony(x_profile_id: Optional[str] = Header(default=None)):
    """Ceremony report for the current cycle."""
    from career.service import get_ceremony

    try:
        out = await asyncio.to_thread(get_ceremony, _require_profile_id(x_profile_id), db_path=get_db_path())
        return {"ok": True, **out}
    except CareerError as exc:
        return _career_error_response(exc)
    except Exception as exc:
        logger.exception("ceremony report failed")
        raise HTTPException(status_code=500, detail=f"Ceremony report failed: {exc}")


@router.post("/api/ceremony/complete")
async def api_ceremony_complete(x_profile_id: Optional[str] = Header(default=None)):
    from career.service import complete_ceremony

    try:
        out = await asyncio.to_thread(complete_ceremony, _require_profile_id(x_profile_id), db_path=get_db_path())
        return {"ok": True, **out}
    except CareerError as exc:
        return _career_error_response(exc)
    except Exception as exc:
        logger.exception("ceremony completion failed")
        raise HTTPException(status_code=500, detail=f"Ceremony completion failed: {exc}")
