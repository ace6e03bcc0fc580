"""
/snapshot — export every stored session as JSON, or replace them all from one.
"""

from __future__ import annotations

from fastapi import APIRouter, Depends, Request

from ...api.schemas import SnapshotImportOut, SnapshotIn
from ...store.snapshot import export_snapshot, import_snapshot

router = APIRouter(prefix="/snapshot", tags=["snapshot"])


def _get_store(request: Request):
    return request.app.state.store


def _get_controller(request: Request):
    return request.app.state.controller


@router.get("")
def get_snapshot(store=Depends(_get_store)):
    return export_snapshot(store)


@router.post("", response_model=SnapshotImportOut)
def post_snapshot(payload: SnapshotIn, store=Depends(_get_store), controller=Depends(_get_controller)):
    """
    Replace the store's contents. Pending alerts are rebuilt for whatever
    fast the snapshot leaves running.
    """
    count = import_snapshot(store, payload.model_dump())
    controller.resync()
    return SnapshotImportOut(imported=count)
