from __future__ import annotations

from enum import Enum
from typing import Dict

from .schemas import RequestEnvelope


class RequestKind(str, Enum):
    CAN_FULFILL = "can_fulfill"
    LAUNCH = "launch"
    ADJUST_POINTS = "adjust_points"
    SUMMARY = "summary"
    CONFIGURE_KIDS = "configure_kids"
    HELP = "help"
    STOP = "stop"
    FALLBACK = "fallback"
    SESSION_ENDED = "session_ended"
    UNSUPPORTED = "unsupported"


ADJUST_POINTS_INTENT = "AdjustPointsIntent"
SUMMARY_INTENT = "SummaryIntent"
CONFIGURE_KIDS_INTENT = "ConfigureKidsIntent"

INTENTS: Dict[str, RequestKind] = {
    ADJUST_POINTS_INTENT: RequestKind.ADJUST_POINTS,
    SUMMARY_INTENT: RequestKind.SUMMARY,
    CONFIGURE_KIDS_INTENT: RequestKind.CONFIGURE_KIDS,
    "AMAZON.HelpIntent": RequestKind.HELP,
    "AMAZON.CancelIntent": RequestKind.STOP,
    "AMAZON.StopIntent": RequestKind.STOP,
    "AMAZON.FallbackIntent": RequestKind.FALLBACK,
}

REQUEST_TYPES: Dict[str, RequestKind] = {
    "CanFulfillIntentRequest": RequestKind.CAN_FULFILL,
    "LaunchRequest": RequestKind.LAUNCH,
    "SessionEndedRequest": RequestKind.SESSION_ENDED,
}


def classify_request(envelope: RequestEnvelope) -> RequestKind:
    request_type = envelope.request.type
    if request_type == "IntentRequest":
        # Unrecognised intents get the fallback reply rather than an error.
        return INTENTS.get(envelope.intent_name or "", RequestKind.FALLBACK)
    return REQUEST_TYPES.get(request_type, RequestKind.UNSUPPORTED)
