from __future__ import annotations

from pydantic import BaseModel, Field


class CreateProfileRequest(BaseModel):
    profile_id: str
    name: str
    country: str  # US | ID
    branch: str  # US_ARMY | US_NAVY | ID_TNI_AD | ID_TNI_AL
    start_age: int = 18


class PauseRequest(BaseModel):
    reason: str  # MODAL | SUBPAGE


class ResumeRequest(BaseModel):
    pause_token: str


class TimeScaleRequest(BaseModel):
    scale: int = Field(..., description="1 or 3")


class DecisionChoiceRequest(BaseModel):
    event_id: int
    option_id: str
