"""
/fasts — start, stop, correct and delete fasting sessions; current state.
"""

from __future__ import annotations

from fastapi import APIRouter, Depends, HTTPException, Request

from ...api.schemas import (
    CelebrationOut,
    CorrectionRequest,
    FastingStateOut,
    NotificationActionRequest,
    SessionOut,
    StartFastRequest,
)
from ...core.session import FastingSession
from ...core.units import utcnow

router = APIRouter(prefix="/fasts", tags=["fasts"])


def _get_controller(request: Request):
    return request.app.state.controller


def session_out(session: FastingSession, now=None) -> SessionOut:
    now = now or utcnow()
    return SessionOut(
        id=session.id,
        start_time=session.start_time,
        end_time=session.end_time,
        goal_minutes=session.goal_minutes,
        goal_celebration_shown=session.goal_celebration_shown,
        active=session.is_active,
        duration_seconds=session.duration(now).total_seconds(),
        duration_text=session.formatted_duration(now),
        goal_met=session.goal_met(now),
    )


def _state_out(controller) -> FastingStateOut:
    return FastingStateOut(**controller.current_state().__dict__)


@router.get("/current", response_model=FastingStateOut)
def get_current(controller=Depends(_get_controller)):
    """Derived state of the running fast (or the idle state)."""
    return _state_out(controller)


@router.post("/start", response_model=FastingStateOut, status_code=201)
def start_fast(req: StartFastRequest, controller=Depends(_get_controller)):
    """Start a fast; 409 when one is already running."""
    controller.start_fast(req.goal_minutes)
    return _state_out(controller)


@router.post("/stop", response_model=SessionOut)
def stop_fast(controller=Depends(_get_controller)):
    session = controller.stop_fast()
    if session is None:
        raise HTTPException(status_code=404, detail="No fast in progress")
    return session_out(session)


@router.post("/celebration", response_model=CelebrationOut)
def claim_celebration(controller=Depends(_get_controller)):
    """True the first time the running fast is seen with its goal met."""
    return CelebrationOut(celebrate=controller.claim_celebration())


@router.post("/notification-action", response_model=FastingStateOut)
def notification_action(req: NotificationActionRequest, controller=Depends(_get_controller)):
    controller.handle_notification_action(req.action)
    return _state_out(controller)


@router.put("/{session_id}", response_model=SessionOut)
def correct_fast(session_id: str, req: CorrectionRequest, controller=Depends(_get_controller)):
    """Correct a fast's range and goal; 422 when end <= start or goal <= 0."""
    session = controller.correct(session_id, req.start_time, req.end_time, req.goal_minutes)
    return session_out(session)


@router.delete("/{session_id}")
def delete_fast(session_id: str, controller=Depends(_get_controller)):
    if not controller.delete(session_id):
        raise HTTPException(status_code=404, detail="Fast not found")
    return {"status": "deleted"}
