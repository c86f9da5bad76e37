from __future__ import annotations

from typing import List, Optional

from pydantic import BaseModel


class TrainingRequest(BaseModel):
    intensity: str  # LOW | MEDIUM | HIGH


class DeploymentRequest(BaseModel):
    mission_type: str  # PATROL | SUPPORT
    duration_days: Optional[int] = None


class AcademyRequest(BaseModel):
    tier: int
    answers: List[int]


class TravelRequest(BaseModel):
    place: str


class SocialInteractionRequest(BaseModel):
    npc_id: str
    interaction: str  # MENTOR | SUPPORT | BOND | DEBRIEF


class CommandRequest(BaseModel):
    action: str  # PLAN_MISSION | ISSUE_SANCTION | ISSUE_PROMOTION
    target_npc_id: Optional[str] = None
    note: Optional[str] = None


class RecruitmentRequest(BaseModel):
    division: str
    answers: List[int]
