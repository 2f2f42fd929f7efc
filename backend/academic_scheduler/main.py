import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request, status
from fastapi.encoders import jsonable_encoder
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse

from academic_scheduler.api.routes import catalog, health, schedule_entries, schedules
from academic_scheduler.core.config import get_settings
from academic_scheduler.core.exceptions import AppError, ErrorKind
from academic_scheduler.db.bootstrap import ensure_runtime_schema
from academic_scheduler.db.session import engine

settings = get_settings()


def configure_logging(level: str) -> None:
    logging.basicConfig(
        level=level,
        format="%(asctime)s %(levelname)s [%(name)s] %(message)s",
    )
    logging.getLogger("academic_scheduler").setLevel(level)


@asynccontextmanager
async def lifespan(_: FastAPI):
    configure_logging(settings.log_level)
    ensure_runtime_schema(engine, seed_time_slots=settings.seed_time_slots_on_startup)
    yield


async def app_error_handler(request: Request, exc: AppError):
    return JSONResponse(status_code=exc.status_code, content=jsonable_encoder(exc.to_dict()))


async def request_validation_error_handler(request: Request, exc: RequestValidationError):
    return JSONResponse(
        status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
        content=jsonable_encoder(
            {
                "kind": ErrorKind.validation_error.value,
                "message": "Request validation failed",
                "details": {"errors": exc.errors()},
            }
        ),
    )


app = FastAPI(title=settings.project_name, lifespan=lifespan)
app.add_exception_handler(AppError, app_error_handler)
app.add_exception_handler(RequestValidationError, request_validation_error_handler)

app.include_router(health.router, prefix=settings.api_prefix, tags=["health"])
app.include_router(catalog.router, prefix=settings.api_prefix, tags=["catalog"])
app.include_router(schedules.router, prefix=f"{settings.api_prefix}/schedules", tags=["schedules"])
app.include_router(
    schedule_entries.router,
    prefix=f"{settings.api_prefix}/schedule-entries",
    tags=["schedule-entries"],
)
