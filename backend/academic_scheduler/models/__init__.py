from academic_scheduler.models.course_assignment import CourseAssignment  # noqa: F401
from academic_scheduler.models.schedule import (  # noqa: F401
    Schedule,
    ScheduleEntry,
    SessionType,
    WeekDay,
)
from academic_scheduler.models.time_slot import TimeSlot  # noqa: F401
