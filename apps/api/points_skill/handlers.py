"""One handler per request kind."""
from __future__ import annotations

import logging
from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, Callable, Dict, Optional

from .aggregator import build_totals, date_labels, local_now, window_dates, window_totals
from .config import AppConfig
from .responses import (
    APL_INTERFACE,
    SkillResponse,
    ResponseBuilder,
    ask,
    can_fulfill_response,
    format_points,
    join_names,
    load_document,
    render_document_directive,
    tell,
)
from .router import ADJUST_POINTS_INTENT, CONFIGURE_KIDS_INTENT, SUMMARY_INTENT, RequestKind
from .schemas import PERIOD_TITLES, FamilyConfig, Period, PointEvent, RequestEnvelope
from .sheets import SheetsStore, get_store
from .slots import (
    is_amount,
    match_person,
    parse_kid_list,
    parse_period,
    signed_delta,
    slot_value,
)
from .trend import build_trend_payload

logger = logging.getLogger(__name__)

ACTOR = "Parent"

ONBOARDING_SPEECH = (
    "Welcome to Family Points. To get started, tell me your kids' names. "
    "For example, say: my kids are Anna and Ben."
)
ONBOARDING_REPROMPT = "Who are your kids? Say, for example: my kids are Anna and Ben."
KIDS_REPROMPT = "I didn't catch any names. Please tell me your kids' names, like Anna and Ben."
FALLBACK_SPEECH = "Sorry, I did not catch that. Try saying add a point, or ask for today's summary."
GOODBYE_SPEECH = "Goodbye."

PERIOD_OPENERS = {
    Period.TODAY: "Today",
    Period.WEEK: "This week",
    Period.MONTH: "This month",
}


@dataclass
class SkillContext:
    envelope: RequestEnvelope
    config: AppConfig
    store_factory: Optional[Callable[[AppConfig], SheetsStore]] = None
    store_override: Optional[SheetsStore] = None
    now_override: Optional[datetime] = None
    _store: Optional[SheetsStore] = field(default=None, init=False, repr=False)
    _family: Optional[FamilyConfig] = field(default=None, init=False, repr=False)
    _family_loaded: bool = field(default=False, init=False, repr=False)

    @property
    def store(self) -> SheetsStore:
        if self._store is None:
            factory = self.store_factory or get_store
            self._store = self.store_override or factory(self.config)
        return self._store

    @property
    def now(self) -> datetime:
        if self.now_override is None:
            self.now_override = local_now(self.config.tzinfo)
        return self.now_override

    def user_id(self) -> str:
        user_id = self.envelope.user_id
        if not user_id:
            raise ValueError("Request envelope carries no user id.")
        return user_id

    def family(self) -> Optional[FamilyConfig]:
        if not self._family_loaded:
            self._family = self.store.find_family(self.user_id())
            self._family_loaded = True
            family = self._family
            logger.info(
                "family lookup",
                extra={
                    "configured": bool(family and family.is_configured),
                    "kid_count": len(family.kids) if family else 0,
                },
            )
        return self._family

    def configured_family(self) -> Optional[FamilyConfig]:
        family = self.family()
        if family is None or not family.is_configured:
            return None
        return family


def onboarding_prompt() -> SkillResponse:
    return ask(ONBOARDING_SPEECH, ONBOARDING_REPROMPT)


def handle_launch(ctx: SkillContext) -> SkillResponse:
    family = ctx.configured_family()
    if family is None:
        return onboarding_prompt()
    speech = (
        f"You can add or reduce points for {join_names(family.kids, 'or')}, "
        "or ask for today's summary."
    )
    return ask(speech)


def handle_adjust_points(ctx: SkillContext) -> SkillResponse:
    family = ctx.configured_family()
    if family is None:
        return onboarding_prompt()

    intent = ctx.envelope.request.intent
    person = match_person(slot_value(intent, "person"), family.kids)
    if person is None:
        speech = f"Who should I update? You can say {join_names(family.kids, 'or')}."
        return ask(speech)

    delta = signed_delta(slot_value(intent, "delta"), slot_value(intent, "direction"))
    amount = abs(delta)
    now = ctx.now
    today = now.date()
    event = PointEvent(
        timestamp=now.isoformat(),
        date=today.isoformat(),
        person=person,
        delta=delta,
        actor=ACTOR,
        note=f"Added {amount}" if delta > 0 else f"Reduced {amount}",
    )
    ctx.store.append_event(family.tab_name, event)

    events = ctx.store.read_events(family.tab_name)
    dates = window_dates(today, Period.TODAY)
    totals = build_totals(events, dates, family.kids)
    today_total = totals[today.isoformat()][person]

    action = "added" if delta > 0 else "reduced"
    speech = (
        f"Okay, {action} {format_points(amount)} for {person}. "
        f"{person} has {format_points(today_total)} today."
    )
    return tell(speech)


def summary_speech(period: Period, person_totals: Dict[str, int]) -> str:
    parts = [f"{name} has {format_points(value)}" for name, value in person_totals.items()]
    return f"{PERIOD_OPENERS[period]}, {join_names(parts)}."


def handle_summary(ctx: SkillContext) -> SkillResponse:
    family = ctx.configured_family()
    if family is None:
        return onboarding_prompt()

    period = parse_period(slot_value(ctx.envelope.request.intent, "period"))
    today = ctx.now.date()
    dates = window_dates(today, period)
    events = ctx.store.read_events(family.tab_name)
    totals = build_totals(events, dates, family.kids)

    if period == Period.TODAY:
        person_totals = dict(totals[today.isoformat()])
    else:
        person_totals = window_totals(totals, dates, family.kids)

    builder = ResponseBuilder().speak(summary_speech(period, person_totals)).end_session()
    if ctx.envelope.supports_interface(APL_INTERFACE):
        payload = build_trend_payload(
            dates,
            date_labels(dates),
            totals,
            family.kids,
            title=PERIOD_TITLES[period],
        )
        document = load_document(str(ctx.config.resolved_apl_document_path))
        builder.add_directive(render_document_directive(payload, document))
    return builder.build()


def handle_configure_kids(ctx: SkillContext) -> SkillResponse:
    kids = parse_kid_list(slot_value(ctx.envelope.request.intent, "kids"))
    if not kids:
        return ask(KIDS_REPROMPT)

    family = ctx.store.save_family(ctx.user_id(), kids, ctx.now)
    speech = (
        f"Great, I'll track points for {join_names(family.kids)}. "
        f"Try saying: add a point for {family.kids[0]}."
    )
    return ask(speech, "You can add points, reduce points, or ask for a summary.")


def handle_help(ctx: SkillContext) -> SkillResponse:
    family = ctx.configured_family()
    if family is None:
        return onboarding_prompt()
    first, last = family.kids[0], family.kids[-1]
    speech = (
        f"Try saying: add a point for {first}, reduce two points for {last}, "
        "or what is this week's summary. To change your kids, say: my kids are, "
        "followed by their names."
    )
    return ask(speech)


def handle_stop(ctx: SkillContext) -> SkillResponse:
    return tell(GOODBYE_SPEECH)


def handle_fallback(ctx: SkillContext) -> SkillResponse:
    return ask(FALLBACK_SPEECH)


def handle_session_ended(ctx: SkillContext) -> SkillResponse:
    logger.info("session ended", extra={"reason": ctx.envelope.request.reason})
    return SkillResponse()


def handle_unsupported(ctx: SkillContext) -> SkillResponse:
    logger.warning("unsupported request type", extra={"type": ctx.envelope.request.type})
    return SkillResponse()


def _slot_state(understand: str, fulfill: Optional[str] = None) -> Dict[str, str]:
    return {"canUnderstand": understand, "canFulfill": fulfill or understand}


def _adjust_slot_states(ctx: SkillContext) -> tuple[str, Dict[str, Any]]:
    intent = ctx.envelope.request.intent
    raw_person = slot_value(intent, "person")
    raw_delta = slot_value(intent, "delta")
    raw_direction = slot_value(intent, "direction")

    family = ctx.configured_family() if raw_person else None
    person = match_person(raw_person, family.kids) if family else None

    if person:
        person_state = _slot_state("YES")
    elif raw_person and family:
        person_state = _slot_state("NO")
    else:
        person_state = _slot_state("MAYBE")

    if not raw_delta:
        delta_state = _slot_state("MAYBE")
    elif is_amount(raw_delta):
        delta_state = _slot_state("YES")
    else:
        delta_state = _slot_state("NO")

    direction_state = _slot_state("YES") if raw_direction else _slot_state("MAYBE")
    slots = {"person": person_state, "delta": delta_state, "direction": direction_state}
    return ("YES" if person else "MAYBE"), slots


def handle_can_fulfill(ctx: SkillContext) -> SkillResponse:
    """Answer the pre-check without writing anything."""

    intent_name = ctx.envelope.intent_name
    if intent_name == ADJUST_POINTS_INTENT:
        verdict, slots = _adjust_slot_states(ctx)
        return can_fulfill_response(verdict, slots)
    if intent_name in (SUMMARY_INTENT, CONFIGURE_KIDS_INTENT):
        return can_fulfill_response("YES")
    return can_fulfill_response("NO")


HANDLERS: Dict[RequestKind, Callable[[SkillContext], SkillResponse]] = {
    RequestKind.CAN_FULFILL: handle_can_fulfill,
    RequestKind.LAUNCH: handle_launch,
    RequestKind.ADJUST_POINTS: handle_adjust_points,
    RequestKind.SUMMARY: handle_summary,
    RequestKind.CONFIGURE_KIDS: handle_configure_kids,
    RequestKind.HELP: handle_help,
    RequestKind.STOP: handle_stop,
    RequestKind.FALLBACK: handle_fallback,
    RequestKind.SESSION_ENDED: handle_session_ended,
    RequestKind.UNSUPPORTED: handle_unsupported,
}

