"""Pydantic schemas shared across the skill."""
from __future__ import annotations

from enum import Enum
from typing import Any, Dict, List, Optional

from pydantic import BaseModel, ConfigDict, Field


class _AlexaModel(BaseModel):
    model_config = ConfigDict(populate_by_name=True, extra="ignore")


class Period(str, Enum):
    TODAY = "today"
    WEEK = "week"
    MONTH = "month"


PERIOD_TITLES = {
    Period.TODAY: "Last 3 Days",
    Period.WEEK: "This Week",
    Period.MONTH: "This Month",
}


class ResolvedValue(_AlexaModel):
    name: Optional[str] = None
    id: Optional[str] = None


class ResolvedValueWrapper(_AlexaModel):
    value: Optional[ResolvedValue] = None


class ResolutionStatus(_AlexaModel):
    code: Optional[str] = None


class Resolution(_AlexaModel):
    authority: Optional[str] = None
    status: Optional[ResolutionStatus] = None
    values: List[ResolvedValueWrapper] = Field(default_factory=list)


class Resolutions(_AlexaModel):
    resolutions_per_authority: List[Resolution] = Field(
        default_factory=list, alias="resolutionsPerAuthority"
    )


class Slot(_AlexaModel):
    name: str = ""
    value: Optional[str] = None
    resolutions: Optional[Resolutions] = None


class Intent(_AlexaModel):
    name: str = ""
    slots: Dict[str, Slot] = Field(default_factory=dict)


class SkillRequest(_AlexaModel):
    type: str
    request_id: Optional[str] = Field(default=None, alias="requestId")
    timestamp: Optional[str] = None
    locale: Optional[str] = None
    intent: Optional[Intent] = None
    reason: Optional[str] = Field(default=None, description="SessionEndedRequest reason")


class User(_AlexaModel):
    user_id: str = Field(..., alias="userId")


class Device(_AlexaModel):
    device_id: Optional[str] = Field(default=None, alias="deviceId")
    supported_interfaces: Dict[str, Any] = Field(
        default_factory=dict, alias="supportedInterfaces"
    )


class SystemContext(_AlexaModel):
    user: Optional[User] = None
    device: Optional[Device] = None


class Context(_AlexaModel):
    system: Optional[SystemContext] = Field(default=None, alias="System")


class Session(_AlexaModel):
    session_id: Optional[str] = Field(default=None, alias="sessionId")
    new: bool = False
    user: Optional[User] = None


class RequestEnvelope(_AlexaModel):
    """Inbound voice-platform request."""

    version: str = "1.0"
    session: Optional[Session] = None
    context: Optional[Context] = None
    request: SkillRequest

    @property
    def user_id(self) -> Optional[str]:
        system = self.context.system if self.context else None
        if system and system.user:
            return system.user.user_id
        if self.session and self.session.user:
            return self.session.user.user_id
        return None

    @property
    def intent_name(self) -> Optional[str]:
        return self.request.intent.name if self.request.intent else None

    def supports_interface(self, name: str) -> bool:
        system = self.context.system if self.context else None
        if not system or not system.device:
            return False
        return name in system.device.supported_interfaces


class PointEvent(BaseModel):
    timestamp: str
    date: str = Field(description="Calendar day in the family timezone (YYYY-MM-DD)")
    person: str
    delta: int
    actor: str = "Parent"
    note: str = ""

    def as_row(self) -> List[Any]:
        return [self.timestamp, self.date, self.person, self.delta, self.actor, self.note]


class FamilyConfig(BaseModel):
    user_id: str
    tab_name: str
    kids: List[str] = Field(default_factory=list)
    created_at: str = ""
    updated_at: str = ""

    @property
    def is_configured(self) -> bool:
        return bool(self.kids)

    def as_row(self) -> List[str]:
        return [self.user_id, self.tab_name, ", ".join(self.kids), self.created_at, self.updated_at]
