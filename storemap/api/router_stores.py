"""
Store endpoints — store list, insegna/gruppo distributions, analytics overview.
"""
from __future__ import annotations

from fastapi import APIRouter, Depends, HTTPException, Query
from fastapi.responses import JSONResponse

from storemap.data.store import DataStore
from storemap.api.dependencies import get_store
from storemap.api.response_models import GroupCountsResponse
from storemap.analytics.common import frame_to_records, sanitize_for_json

router = APIRouter(prefix="/api/stores", tags=["stores"])


@router.get("")
def list_stores(store: DataStore = Depends(get_store)):
    """All displayable stores."""
    return JSONResponse(content=frame_to_records(store.stores))


@router.get("/counts", response_model=GroupCountsResponse)
def group_counts(
    field: str = Query("insegna", description="insegna|gruppo"),
    store: DataStore = Depends(get_store),
):
    """Store counts per insegna or gruppo, largest first."""
    try:
        counts = store.group_counts(field)
    except ValueError as e:
        raise HTTPException(400, str(e))
    return GroupCountsResponse(field=field, counts=counts)


@router.get("/overview")
def overview(store: DataStore = Depends(get_store)):
    """Totals and distributions for the analytics panel."""
    return JSONResponse(content=sanitize_for_json(store.overview()))
