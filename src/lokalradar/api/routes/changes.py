"""
Change query API routes.

Address-change events, employee change summaries and the export snapshot.
"""

from typing import Optional

from fastapi import APIRouter, HTTPException, Query

from lokalradar.analysis.dataset import ChangeDirection
from lokalradar.api.deps import CurrentDataset, State
from lokalradar.api.schemas import (
    ChangeResponse,
    EmployeeChangeResponse,
    SnapshotResponse,
)

router = APIRouter()


@router.get("/changes", response_model=list[ChangeResponse])
async def list_changes(
    state: State,
    dataset: CurrentDataset,
    years_ago: Optional[int] = Query(
        None, ge=0, description="Only moves made this many years before the reference year"
    ),
    direction: ChangeDirection = Query(ChangeDirection.ALL, description="Employee change sign"),
    limit: Optional[int] = Query(None, ge=1, description="Maximum number of events"),
    latest_only: bool = Query(False, description="Keep only each company's most recent move"),
):
    """
    List address-change events, largest headcount change first.

    With `years_ago` the since-move figures are included. The returned
    list becomes the current export snapshot.
    """
    items = dataset.address_changes_filtered(
        years_ago=years_ago,
        direction=direction,
        count=limit,
        latest_only=latest_only,
    )
    state.record_snapshot(
        items,
        query={
            "years_ago": years_ago,
            "direction": direction.value,
            "limit": limit,
            "latest_only": latest_only,
        },
    )
    return [item.to_dict() for item in items]


@router.get("/changes/by-year", response_model=dict[int, list[ChangeResponse]])
async def changes_by_year(dataset: CurrentDataset):
    """Address-change events grouped by move year."""
    return {
        year: [e.to_dict() for e in events]
        for year, events in dataset.changes_by_year().items()
    }


@router.get("/changes/extreme", response_model=list[ChangeResponse])
async def extreme_changes(dataset: CurrentDataset):
    """Moves with a very large relative or absolute headcount change."""
    return [e.to_dict() for e in dataset.extreme_changes()]


@router.get("/changes/top-movers", response_model=list[ChangeResponse])
async def top_movers(
    dataset: CurrentDataset,
    years_ago: int = Query(..., ge=0, description="Move year, counted back from the reference year"),
    direction: ChangeDirection = Query(ChangeDirection.ALL),
    limit: int = Query(10, ge=1, le=1000),
):
    """Movers from one year, largest headcount change at the move first."""
    movers = dataset.top_movers(years_ago, count=limit, direction=direction)
    return [m.to_dict() for m in movers]


@router.get("/employee-changes", response_model=list[EmployeeChangeResponse])
async def employee_changes(
    dataset: CurrentDataset,
    direction: ChangeDirection = Query(ChangeDirection.ALL),
    limit: int = Query(10, ge=1, le=1000),
):
    """Companies with the largest change between first and last observation."""
    return [s.to_dict() for s in dataset.top_employee_changes(count=limit, direction=direction)]


@router.get("/export/snapshot", response_model=SnapshotResponse)
async def export_snapshot(state: State, dataset: CurrentDataset):
    """The last event list returned by GET /changes, with dataset statistics."""
    if state.snapshot is None:
        raise HTTPException(
            status_code=409,
            detail="No event list has been returned since the last ingest",
        )

    return {**state.snapshot.to_dict(), "statistics": dataset.statistics.to_dict()}
