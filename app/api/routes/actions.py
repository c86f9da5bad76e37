from __future__ import annotations

import asyncio
import logging
from typing import Optional

from fastapi import APIRouter, Header, HTTPException

from app.schemas.actions import (
    AcademyRequest,
    CommandRequest,
    DeploymentRequest,
    RecruitmentRequest,
    SocialInteractionRequest,
    TrainingRequest,
    TravelRequest,
)
from app.services.career_facade import _career_error_response, _require_profile_id
from career.errors import CareerError
from config import get_db_path

router = APIRouter()
logger = logging.getLogger(__name__)


@router.post("/api/actions/training")
async def api_action_training(req: TrainingRequest, x_profile_id: Optional[str] = Header(default=None)):
    from career.service import run_training

    try:
        out = await asyncio.to_thread(run_training, _require_profile_id(x_profile_id), req.intensity, db_path=get_db_path())
        return {"ok": True, **out}
    except CareerError as exc:
        return _career_error_response(exc)
    except Exception as exc:
        logger.exception("training failed")
        raise HTTPException(status_code=500, detail=f"Training failed: {exc}")


@router.post("/api/actions/deployment")
async def api_action_deployment(req: DeploymentRequest, x_profile_id: Optional[str] = Header(default=None)):
    from career.service import run_deployment

    try:
        out = await asyncio.to_thread(
            run_deployment,
            _require_profile_id(x_profile_id),
            req.mission_type,
            req.duration_days,
            db_path=get_db_path(),
        )
        return {"ok": True, **out}
    except CareerError as exc:
        return _career_error_response(exc)
    except Exception as exc:
        logger.exception("deployment failed")
        raise HTTPException(status_code=500, detail=f"Deployment failed: {exc}")


@router.post("/api/actions/career-review")
async def api_action_career_review(x_profile_id: Optional[str] = Header(default=None)):
    from career.service import run_career_review

    try:
        out = await asyncio.to_thread(run_career_review, _require_profile_id(x_profile_id), db_path=get_db_path())
        return {"ok": True, **out}
    except CareerError as exc:
        return _career_error_response(exc)
    except Exception as exc:
        logger.exception("career review failed")
        raise HTTPException(status_code=500, detail=f"Career review failed: {exc}")


@router.post("/api/actions/academy")
async def api_action_academy(req: AcademyRequest, x_profile_id: Optional[str] = Header(default=None)):
    from career.service import run_academy

    try:
        out = await asyncio.to_thread(run_academy, _require_profile_id(x_profile_id), req.tier, req.answers, db_path=get_db_path())
        return {"ok": True, **out}
    except CareerError as exc:
        return _career_error_response(exc)
    except Exception as exc:
        logger.exception("academy exam failed")
        raise HTTPException(status_code=500, detail=f"Academy exam failed: {exc}")


@router.post("/api/actions/travel")
async def api_action_travel(req: TravelRequest, x_profile_id: Optional[str] = Header(default=None)):
    from career.service import run_travel

    try:
        out = await asyncio.to_thread(run_travel, _require_profile_id(x_profile_id), req.place, db_path=get_db_path())
        return {"ok": True, **out}
    except CareerError as exc:
        return _career_error_response(exc)
    except Exception as exc:
        logger.exception("travel failed")
        raise HTTPException(status_code=500, detail=f"Travel failed: {exc}")


@router.post("/api/actions/social")
async def api_action_social(req: SocialInteractionRequest, x_profile_id: Optional[str] = Header(default=None)):
    from career.service import run_social_interaction

    try:
        out = await asyncio.to_thread(
            run_social_interaction,
            _require_profile_id(x_profile_id),
            req.npc_id,
            req.interaction,
            db_path=get_db_path(),
        )
        return {"ok": True, **out}
    except CareerError as exc:
        return _career_error_response(exc)
    except Exception as exc:
        logger.exception("social interaction failed")
        raise HTTPException(status_code=500, detail=f"Social interaction failed: {exc}")


@router.post("/api/actions/command")
async def api_action_command(req: CommandRequest, x_profile_id: Optional[str] = Header(default=None)):
    from career.service import run_command

    try:
        out = await asyncio.to_thread(
            run_command,
            _require_profile_id(x_profile_id),
            req.action,
            req.target_npc_id,
            req.note,
            db_path=get_db_path(),
        )
        return {"ok": True, **out}
    except CareerError as exc:
        return _career_error_response(exc)
    except Exception as exc:
        logger.exception("command action failed")
        raise HTTPException(status_code=500, detail=f"Command action failed: {exc}")


@router.post("/api/actions/recruitment")
async def api_action_recruitment(req: RecruitmentRequest, x_profile_id: Optional[str] = Header(default=None)):
    from career.service import run_recruitment

    try:
        out = await asyncio.to_thread(run_recruitment, _require_profile_id(x_profile_id), req.division, req.answers, db_path=get_db_path())
        return {"ok": True, **out}
    except CareerError as exc:
        return _career_error_response(exc)
    except Exception as exc:
        logger.exception("recruitment failed")
        raise HTTPException(status_code=500, detail=f"Recruitment failed: {exc}")


@router.post("/api/actions/raider-defense")
async def api_action_raider_defense(x_profile_id: Optional[str] = Header(default=None)):
    from career.service import run_raider_defense

    try:
        out = await asyncio.to_thread(run_raider_defense, _require_profile_id(x_profile_id), db_path=get_db_path())
        return {"ok": True, **out}
    except CareerError as exc:
        return _career_error_response(exc)
    except Exception as exc:
        logger.exception("raider defense failed")
        raise HTTPException(status_code=500, detail=f"Raider defense failed: {exc}")
