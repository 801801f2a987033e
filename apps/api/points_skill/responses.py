"""Skill response models and speech helpers."""
from __future__ import annotations

import json
from functools import lru_cache
from pathlib import Path
from typing import Any, Dict, List, Optional, Sequence

from pydantic import BaseModel, ConfigDict, Field

APL_INTERFACE = "Alexa.Presentation.APL"
RENDER_DOCUMENT = "Alexa.Presentation.APL.RenderDocument"
TREND_TOKEN = "trend"


class _ResponseModel(BaseModel):
    model_config = ConfigDict(populate_by_name=True)


class OutputSpeech(_ResponseModel):
    type: str = "PlainText"
    text: str


class Reprompt(_ResponseModel):
    output_speech: OutputSpeech = Field(..., alias="outputSpeech")


class ResponseBody(_ResponseModel):
    output_speech: Optional[OutputSpeech] = Field(default=None, alias="outputSpeech")
    reprompt: Optional[Reprompt] = None
    should_end_session: Optional[bool] = Field(default=None, alias="shouldEndSession")
    directives: Optional[List[Dict[str, Any]]] = None
    can_fulfill_intent: Optional[Dict[str, Any]] = Field(default=None, alias="canFulfillIntent")


class SkillResponse(_ResponseModel):
    version: str = "1.0"
    session_attributes: Dict[str, Any] = Field(default_factory=dict, alias="sessionAttributes")
    response: ResponseBody = Field(default_factory=ResponseBody)

    def to_payload(self) -> Dict[str, Any]:
        return self.model_dump(by_alias=True, exclude_none=True)


class ResponseBuilder:
    def __init__(self) -> None:
        self._speech: Optional[str] = None
        self._reprompt: Optional[str] = None
        self._end_session: Optional[bool] = None
        self._directives: List[Dict[str, Any]] = []

    def speak(self, text: str) -> "ResponseBuilder":
        self._speech = text
        return self

    def reprompt(self, text: str) -> "ResponseBuilder":
        self._reprompt = text
        return self

    def end_session(self, flag: bool = True) -> "ResponseBuilder":
        self._end_session = flag
        return self

    def add_directive(self, directive: Dict[str, Any]) -> "ResponseBuilder":
        self._directives.append(directive)
        return self

    def build(self) -> SkillResponse:
        end_session = self._end_session
        if end_session is None and self._speech is not None:
            end_session = self._reprompt is None
        body = ResponseBody(
            output_speech=OutputSpeech(text=self._speech) if self._speech is not None else None,
            reprompt=Reprompt(output_speech=OutputSpeech(text=self._reprompt))
            if self._reprompt is not None
            else None,
            should_end_session=end_session,
            directives=list(self._directives) or None,
        )
        return SkillResponse(response=body)


def ask(speech: str, reprompt: Optional[str] = None) -> SkillResponse:
    return ResponseBuilder().speak(speech).reprompt(reprompt or speech).build()


def tell(speech: str) -> SkillResponse:
    return ResponseBuilder().speak(speech).build()


def can_fulfill_response(can_fulfill: str, slots: Optional[Dict[str, Any]] = None) -> SkillResponse:
    payload: Dict[str, Any] = {"canFulfill": can_fulfill}
    if slots:
        payload["slots"] = slots
    return SkillResponse(response=ResponseBody(can_fulfill_intent=payload))


@lru_cache
def load_document(path: str) -> Dict[str, Any]:
    return json.loads(Path(path).read_text())


def render_document_directive(payload: Dict[str, Any], document: Dict[str, Any]) -> Dict[str, Any]:
    return {
        "type": RENDER_DOCUMENT,
        "token": TREND_TOKEN,
        "document": document,
        "datasources": {"payload": payload},
    }


def format_points(value: int) -> str:
    magnitude = abs(value)
    unit = "point" if magnitude == 1 else "points"
    if value < 0:
        return f"minus {magnitude} {unit}"
    return f"{magnitude} {unit}"


def join_names(names: Sequence[str], conjunction: str = "and") -> str:
    names = list(names)
    if not names:
        return ""
    if len(names) == 1:
        return names[0]
    return f"{', '.join(names[:-1])} {conjunction} {names[-1]}"
