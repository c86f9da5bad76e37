from __future__ import annotations

import asyncio
import logging
from typing import Optional

from fastapi import APIRouter, Header, HTTPException

from app.schemas.game import (
    CreateProfileRequest,
    DecisionChoiceRequest,
    PauseRequest,
    ResumeRequest,
    TimeScaleRequest,
)
from app.services.career_facade import _career_error_response, _require_profile_id
from career.errors import CareerError
from config import get_db_path

router = APIRouter()
logger = logging.getLogger(__name__)


@router.post("/api/profiles")
async def api_create_profile(req: CreateProfileRequest):
    from career.service import create_profile

    try:
        out = await asyncio.to_thread(
            create_profile,
            req.profile_id,
            req.name,
            req.country,
            req.branch,
            req.start_age,
            db_path=get_db_path(),
        )
        return {"ok": True, **out}
    except CareerError as exc:
        return _career_error_response(exc)
    except Exception as exc:
        logger.exception("profile creation failed")
        raise HTTPException(status_code=500, detail=f"Profile creation failed: {exc}")


@router.get("/api/game/snapshot")
async def api_game_snapshot(x_profile_id: Optional[str] = Header(default=None)):
    from career.service import get_snapshot

    try:
        out = await asyncio.to_thread(get_snapshot, _require_profile_id(x_profile_id), db_path=get_db_path())
        return {"ok": True, **out}
    except CareerError as exc:
        return _career_error_response(exc)
    except Exception as exc:
        logger.exception("snapshot failed")
        raise HTTPException(status_code=500, detail=f"Snapshot failed: {exc}")


@router.post("/api/game/pause")
async def api_game_pause(req: PauseRequest, x_profile_id: Optional[str] = Header(default=None)):
    from career.service import pause_game

    try:
        out = await asyncio.to_thread(pause_game, _require_profile_id(x_profile_id), req.reason, db_path=get_db_path())
        return {"ok": True, **out}
    except CareerError as exc:
        return _career_error_response(exc)
    except Exception as exc:
        logger.exception("pause failed")
        raise HTTPException(status_code=500, detail=f"Pause failed: {exc}")


@router.post("/api/game/resume")
async def api_game_resume(req: ResumeRequest, x_profile_id: Optional[str] = Header(default=None)):
    from career.service import resume_game

    try:
        out = await asyncio.to_thread(resume_game, _require_profile_id(x_profile_id), req.pause_token, db_path=get_db_path())
        return {"ok": True, **out}
    except CareerError as exc:
        return _career_error_response(exc)
    except Exception as exc:
        logger.exception("resume failed")
        raise HTTPException(status_code=500, detail=f"Resume failed: {exc}")


@router.post("/api/game/time-scale")
async def api_game_time_scale(req: TimeScaleRequest, x_profile_id: Optional[str] = Header(default=None)):
    from career.service import set_time_scale

    try:
        out = await asyncio.to_thread(set_time_scale, _require_profile_id(x_profile_id), req.scale, db_path=get_db_path())
        return {"ok": True, **out}
    except CareerError as exc:
        return _career_error_response(exc)
    except Exception as exc:
        logger.exception("time scale change failed")
        raise HTTPException(status_code=500, detail=f"Time scale change failed: {exc}")


@router.post("/api/game/restart")
async def api_game_restart(x_profile_id: Optional[str] = Header(default=None)):
    from career.service import restart_world

    try:
        out = await asyncio.to_thread(restart_world, _require_profile_id(x_profile_id), db_path=get_db_path())
        return {"ok": True, **out}
    except CareerError as exc:
        return _career_error_response(exc)
    except Exception as exc:
        logger.exception("restart failed")
        raise HTTPException(status_code=500, detail=f"Restart failed: {exc}")


@router.post("/api/game/decisions/choose")
async def api_game_choose_decision(req: DecisionChoiceRequest, x_profile_id: Optional[str] = Header(default=None)):
    from career.service import choose_decision

    try:
        out = await asyncio.to_thread(choose_decision, _require_profile_id(x_profile_id), req.event_id, req.option_id, db_path=get_db_path())
        return {"ok": True, **out}
    except CareerError as exc:
        return _career_error_response(exc)
    except Exception as exc:
        logger.exception("decision choice failed")
        raise HTTPException(status_code=500, detail=f"Decision choice failed: {exc}")


@router.get("/api/game/decision-logs")
async def api_game_decision_logs(
    cursor: Optional[int] = None,
    limit: int = 20,
    x_profile_id: Optional[str] = Header(default=None),
):
    from career.service import list_decision_logs

    try:
        out = await asyncio.to_thread(list_decision_logs, _require_profile_id(x_profile_id), cursor=cursor, limit=limit, db_path=get_db_path())
        return {"ok": True, **out}
    except CareerError as exc:
        return _career_error_response(exc)
    except Exception as exc:
        logger.exception("decision log listing failed")
        raise HTTPException(status_code=500, detail=f"Decision log listing failed: {exc}")
