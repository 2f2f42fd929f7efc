from fastapi import APIRouter, Depends, status
from sqlalchemy.orm import Session

from academic_scheduler.api.deps import get_db
from academic_scheduler.schemas.schedule import ScheduleCreate, ScheduleOut, ScheduleUpdate
from academic_scheduler.services import schedules

router = APIRouter()


@router.get("/", response_model=list[ScheduleOut])
def list_schedules(db: Session = Depends(get_db)) -> list[ScheduleOut]:
    return schedules.list_schedules(db)


@router.post("/", response_model=ScheduleOut, status_code=status.HTTP_201_CREATED)
def create_schedule(payload: ScheduleCreate, db: Session = Depends(get_db)) -> ScheduleOut:
    return schedules.create_schedule(db, payload)


@router.get("/{schedule_id}", response_model=ScheduleOut)
def get_schedule(schedule_id: str, db: Session = Depends(get_db)) -> ScheduleOut:
    return schedules.get_schedule(db, schedule_id)


@router.put("/{schedule_id}", response_model=ScheduleOut)
def update_schedule(schedule_id: str, payload: ScheduleUpdate, db: Session = Depends(get_db)) -> ScheduleOut:
    return schedules.update_schedule(db, schedule_id, payload)


@router.delete("/{schedule_id}")
def delete_schedule(schedule_id: str, db: Session = Depends(get_db)) -> dict:
    schedules.delete_schedule(db, schedule_id)
    return {"success": True}
