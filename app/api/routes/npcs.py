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


@router.get("/api/npcs")
async def api_npcs(include_fallen: bool = True, x_profile_id: Optional[str] = Header(default=None)):
    from career.service import list_npcs

    try:
        out = await asyncio.to_thread(list_npcs, _require_profile_id(x_profile_id), include_fallen=include_fallen, db_path=get_db_path())
        return {"ok": True, **out}
    except CareerError as exc:
        return _career_error_response(exc)
    except Exception as exc:
        logger.exception("npc listing failed")
        raise HTTPException(status_code=500, detail=f"NPC listing failed: {exc}")


@router.get("/api/npcs/activity")
async def api_npc_activity(x_profile_id: Optional[str] = Header(default=None)):
    from career.service import get_npc_background_activity

    try:
        out = await asyncio.to_thread(get_npc_background_activity, _require_profile_id(x_profile_id), db_path=get_db_path())
        return {"ok": True, **out}
    except CareerError as exc:
        return _career_error_response(exc)
    except Exception as exc:
        logger.exception("npc activity failed")
        raise HTTPException(status_code=500, detail=f"NPC activity failed: {exc}")


@router.get("/api/raiders")
async def api_raider_outlook(x_profile_id: Optional[str] = Header(default=None)):
    from career.service import get_raider_outlook

    try:
        out = await asyncio.to_thread(get_raider_outlook, _require_profile_id(x_profile_id), db_path=get_db_path())
        return {"ok": True, "raiders": out}
    except CareerError as exc:
        return _career_error_response(exc)
    except Exception as exc:
        logger.exception("raider outlook failed")
        raise HTTPException(status_code=500, detail=f"Raider outlook failed: {exc}")
