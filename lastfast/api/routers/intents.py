"""
/intents — voice-style commands answered with spoken dialog text.
"""

from __future__ import annotations

from fastapi import APIRouter, Depends, Request

from ...api.schemas import IntentOut, StartIntentRequest, StartUntilIntentRequest
from ...core.units import as_utc

router = APIRouter(prefix="/intents", tags=["intents"])


def _get_intents(request: Request):
    return request.app.state.intents


def _out(result) -> IntentOut:
    return IntentOut(dialog=result.dialog, changed=result.changed)


@router.post("/start", response_model=IntentOut)
def start(req: StartIntentRequest, intents=Depends(_get_intents)):
    return _out(intents.start(req.duration_hours))


@router.post("/start-until", response_model=IntentOut)
def start_until(req: StartUntilIntentRequest, intents=Depends(_get_intents)):
    """Start a fast whose goal is the whole minutes until *end_time*."""
    return _out(intents.start_until(as_utc(req.end_time)))


@router.post("/stop", response_model=IntentOut)
def stop(intents=Depends(_get_intents)):
    return _out(intents.stop())


@router.get("/status", response_model=IntentOut)
def status(intents=Depends(_get_intents)):
    return _out(intents.status())
