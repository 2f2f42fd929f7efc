from fastapi import APIRouter, Depends, status
from sqlalchemy.orm import Session

from academic_scheduler.api.deps import get_db
from academic_scheduler.schemas.schedule import (
    BulkScheduleOut,
    BulkScheduleRequest,
    ScheduleEntryCreate,
    ScheduleEntryOut,
    ScheduleEntryUpdate,
)
from academic_scheduler.services import bulk_scheduler, schedule_entries

router = APIRouter()


@router.get("/", response_model=list[ScheduleEntryOut])
def list_schedule_entries(schedule_id: str | None = None, db: Session = Depends(get_db)) -> list[ScheduleEntryOut]:
    return schedule_entries.list_entries(db, schedule_id=schedule_id)


@router.post("/bulk", response_model=BulkScheduleOut, status_code=status.HTTP_201_CREATED)
def create_bulk_schedule_entries(payload: BulkScheduleRequest, db: Session = Depends(get_db)) -> BulkScheduleOut:
    created = bulk_scheduler.create_bulk(db, payload.schedule_id, payload.entries)
    return BulkScheduleOut(
        message=f"Successfully created {len(created)} schedule entries",
        count=len(created),
        entries=[ScheduleEntryOut.model_validate(entry) for entry in created],
    )


@router.post("/", response_model=ScheduleEntryOut, status_code=status.HTTP_201_CREATED)
def create_schedule_entry(payload: ScheduleEntryCreate, db: Session = Depends(get_db)) -> ScheduleEntryOut:
    return schedule_entries.create_entry(db, payload)


@router.get("/{entry_id}", response_model=ScheduleEntryOut)
def get_schedule_entry(entry_id: str, db: Session = Depends(get_db)) -> ScheduleEntryOut:
    return schedule_entries.get_entry(db, entry_id)


@router.put("/{entry_id}", response_model=ScheduleEntryOut)
def update_schedule_entry(
    entry_id: str,
    payload: ScheduleEntryUpdate,
    db: Session = Depends(get_db),
) -> ScheduleEntryOut:
    return schedule_entries.update_entry(db, entry_id, payload)


@router.delete("/{entry_id}")
def delete_schedule_entry(entry_id: str, db: Session = Depends(get_db)) -> dict:
    schedule_entries.delete_entry(db, entry_id)
    return {"success": True}
