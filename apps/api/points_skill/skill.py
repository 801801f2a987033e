"""Request dispatch shared by the web route and the function entry point."""
from __future__ import annotations

import logging
from datetime import datetime
from typing import Any, Dict, Optional

from google.auth.exceptions import RefreshError
from pydantic import ValidationError

from .config import AppConfig, ConfigurationError, get_config
from .handlers import HANDLERS, SkillContext
from .responses import SkillResponse, can_fulfill_response, tell
from .router import RequestKind, classify_request
from .schemas import RequestEnvelope
from .sheets import SheetsStore, reset_service_cache

logger = logging.getLogger(__name__)

CONFIG_APOLOGY = (
    "Sorry, the points skill is not set up yet. "
    "Please check the skill configuration and try again."
)
ERROR_APOLOGY = "Sorry, I had trouble doing that. Please try again later."


def _failure_response(kind: RequestKind, speech: str) -> SkillResponse:
    if kind == RequestKind.CAN_FULFILL:
        return can_fulfill_response("NO")
    return tell(speech)


def handle_request(
    envelope: RequestEnvelope,
    *,
    config: Optional[AppConfig] = None,
    store: Optional[SheetsStore] = None,
    now: Optional[datetime] = None,
) -> SkillResponse:
    kind = classify_request(envelope)
    logger.info(
        "skill request",
        extra={"kind": kind.value, "intent": envelope.intent_name, "request_type": envelope.request.type},
    )
    try:
        ctx = SkillContext(
            envelope=envelope,
            config=config if config is not None else get_config(),
            store_override=store,
            now_override=now,
        )
        return HANDLERS[kind](ctx)
    except ConfigurationError as exc:
        logger.error("skill configuration error", extra={"kind": kind.value, "error": str(exc)})
        return _failure_response(kind, CONFIG_APOLOGY)
    except Exception as exc:
        if isinstance(exc, RefreshError):
            reset_service_cache()
        logger.exception("skill handler failed", exc_info=exc, extra={"kind": kind.value})
        return _failure_response(kind, ERROR_APOLOGY)


def lambda_handler(event: Dict[str, Any], context: Any = None) -> Dict[str, Any]:
    try:
        envelope = RequestEnvelope.model_validate(event)
    except ValidationError as exc:
        logger.exception("invalid skill request envelope", exc_info=exc)
        return tell(ERROR_APOLOGY).to_payload()
    return handle_request(envelope).to_payload()
