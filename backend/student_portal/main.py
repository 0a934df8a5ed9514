"""FastAPI application entrypoint and HTTP controllers.

This module defines the HTTP endpoints of the student portal.
Controllers are intentionally thin: they parse path/query parameters,
delegate to exactly one `StudentService` method and return its
response unchanged. Error translation happens inside the service.

Endpoints implemented:
- POST /student/register
- GET /student/findAll
- GET /student/filter/{student_class}?page=&size=
- GET /student/{id}
- PUT /student/{id}
- DELETE /student/{id}
- GET /health
"""

from fastapi import APIRouter, FastAPI, Depends, Query, Request
from fastapi.responses import JSONResponse, Response
from fastapi.middleware.cors import CORSMiddleware
from sqlmodel import Session
import json
import logging
import time
import uuid
from .database import create_db_and_tables, get_session
from .schemas import StudentDTO
from .services import StudentService
from .config import settings

app = FastAPI(title="Student Portal API")
logger = logging.getLogger("student_portal.api")
if not logger.handlers:
    logging.basicConfig(level=settings.LOG_LEVEL)

# Wide-open CORS keeps local browser testers working without extra config in dev.
if settings.ALLOW_DEV_CORS:
    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

create_db_and_tables()


def _request_log_fields(request: Request, req_id: str, started: float) -> dict:
    return {
        "request_id": req_id,
        "path": request.url.path,
        "method": request.method,
        "duration_ms": round((time.perf_counter() - started) * 1000.0, 2),
        "client": request.client.host if request.client else "unknown",
    }


@app.middleware("http")
async def request_context_middleware(request: Request, call_next):
    req_id = request.headers.get("X-Request-ID", uuid.uuid4().hex)
    request.state.request_id = req_id
    started = time.perf_counter()
    response: Response
    try:
        response = await call_next(request)
    except Exception:
        logger.exception("request_failed %s", json.dumps(_request_log_fields(request, req_id, started), ensure_ascii=True))
        raise
    response.headers["X-Request-ID"] = req_id
    fields = _request_log_fields(request, req_id, started)
    fields["status_code"] = response.status_code
    logger.info("request_done %s", json.dumps(fields, ensure_ascii=True))
    return response


def get_student_service(db: Session = Depends(get_session)) -> StudentService:
    return StudentService(db)


router = APIRouter(prefix="/student", tags=["student"])


@router.post("/register")
def register_student(payload: StudentDTO, svc: StudentService = Depends(get_student_service)) -> JSONResponse:
    """Register a new student with its addresses inline.

    Returns the stored record, including the ids assigned to the
    student and to each address.
    """
    logger.info("Registering student with name: %s", payload.name)
    return svc.register_student(payload)


@router.get("/findAll")
def get_all_students(svc: StudentService = Depends(get_student_service)) -> JSONResponse:
    """List every student."""
    logger.info("Fetching all students")
    return svc.get_all_students()


@router.get("/filter/{student_class}")
def get_students_by_class(
    student_class: str,
    page: int = Query(..., ge=1, description="1-based page number"),
    size: int = Query(..., ge=1),
    svc: StudentService = Depends(get_student_service),
) -> JSONResponse:
    """Return one page of students whose class label equals `student_class`."""
    logger.info("Fetching students for class: %s with pagination - page: %s, size: %s", student_class, page, size)
    return svc.get_students_by_class(student_class, page, size)


@router.get("/{student_id}")
def get_student_by_id(student_id: int, svc: StudentService = Depends(get_student_service)) -> JSONResponse:
    logger.info("Fetching student with ID: %s", student_id)
    return svc.get_student_by_id(student_id)


@router.put("/{student_id}")
def update_student(student_id: int, payload: StudentDTO, svc: StudentService = Depends(get_student_service)) -> JSONResponse:
    """Replace a student's fields and its whole address list."""
    logger.info("Updating student with ID: %s", student_id)
    return svc.update_student(student_id, payload)


@router.delete("/{student_id}")
def delete_student(student_id: int, svc: StudentService = Depends(get_student_service)) -> JSONResponse:
    logger.info("Deleting student with ID: %s", student_id)
    return svc.delete_student(student_id)


app.include_router(router)


@app.get("/health")
def health():
    """Lightweight health check for uptime monitoring."""
    return {"status": "ok"}
