import asyncio
import logging
from typing import Any, Dict

from fastapi import APIRouter, HTTPException, Request
from pydantic import ValidationError

from ..schemas import RequestEnvelope
from ..skill import handle_request

router = APIRouter(tags=["alexa"])
logger = logging.getLogger(__name__)


@router.post("/alexa")
async def alexa_webhook(request: Request) -> Dict[str, Any]:
    """Handle a voice-platform request envelope and return the skill response.

    Supported requests:
    - LaunchRequest: "Alexa, open family points"
    - AdjustPointsIntent: "add a point for Krish", "reduce two points for Adith"
    - SummaryIntent: "what is this week's summary"
    - ConfigureKidsIntent: "my kids are Anna and Ben"
    - AMAZON.HelpIntent / CancelIntent / StopIntent / FallbackIntent
    - CanFulfillIntentRequest pre-checks
    """
    try:
        body = await request.json()
    except ValueError as exc:
        raise HTTPException(status_code=400, detail="Request body must be JSON.") from exc

    try:
        envelope = RequestEnvelope.model_validate(body)
    except ValidationError as exc:
        raise HTTPException(status_code=400, detail="Invalid skill request envelope.") from exc

    logger.info("alexa request received", extra={"request_type": envelope.request.type})

    # Sheets and Secrets Manager clients block, so dispatch runs off the event loop.
    response = await asyncio.to_thread(handle_request, envelope)
    return response.to_payload()
