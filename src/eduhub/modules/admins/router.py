"""
Admins Router

Endpoints:
- POST /admin/register - Create an admin (requires the system key)
- POST /admin/login - Admin login
- GET /admin/users - Latest registered students
- GET /admin/applications - Latest applications, or one student's
- GET /admin/audit-logs - Latest audit events
- POST /admin/institutions/sync - Pull latest courses (super admin)
- GET /admin/jobs - Registered background jobs
- POST /admin/jobs/{job_id}/trigger - Run a job now (super admin)
"""

import logging

from fastapi import APIRouter, Depends, HTTPException, Query, Request, status
from sqlalchemy.ext.asyncio import AsyncSession

from eduhub.core.auth import CurrentAdmin, get_current_admin, require_super_admin
from eduhub.core.database import get_db
from eduhub.core.rate_limit import client_ip, rate_limit
from eduhub.core.scheduler import list_registered_jobs, trigger_job_manually
from eduhub.modules.admins import service
from eduhub.modules.admins.schemas import (
    AdminLoginRequest,
    AdminLoginResponse,
    AdminRegisterRequest,
    AdminResponse,
    JobTriggerResponse,
)
from eduhub.modules.admins.service import AdminServiceError
from eduhub.modules.applications import service as applications
from eduhub.modules.applications.schemas import ApplicationRecordResponse
from eduhub.modules.audit.schemas import AuditLogResponse
from eduhub.modules.institutions import service as institutions
from eduhub.modules.institutions.schemas import CourseSyncRequest, CourseSyncResponse
from eduhub.modules.institutions.service import InstitutionServiceError
from eduhub.modules.users.schemas import UserResponse

logger = logging.getLogger(__name__)

router = APIRouter()


def _to_http(e: AdminServiceError | InstitutionServiceError) -> HTTPException:
    return HTTPException(status_code=e.status_code, detail={"error": e.error_code, "message": e.message})


# ============================================================================
# Admin auth
# ============================================================================


@router.post("/register", response_model=AdminResponse, status_code=status.HTTP_201_CREATED)
@rate_limit(limit=5, window_seconds=300)
async def register_admin(
    request: Request,
    body: AdminRegisterRequest,
    db: AsyncSession = Depends(get_db),
) -> AdminResponse:
    """
    Raises:
        HTTPException 403: Invalid system key
        HTTPException 409: Admin email already exists
    """
    try:
        return await service.register_admin(db, body, ip_address=client_ip(request))
    except AdminServiceError as e:
        raise _to_http(e) from e


@router.post("/login", response_model=AdminLoginResponse)
@rate_limit(limit=10, window_seconds=60)
async def login_admin(
    request: Request,
    credentials: AdminLoginRequest,
    db: AsyncSession = Depends(get_db),
) -> AdminLoginResponse:
    try:
        return await service.login_admin(
            db, credentials.email, credentials.password, ip_address=client_ip(request)
        )
    except AdminServiceError as e:
        raise _to_http(e) from e


# ============================================================================
# Dashboard
# ============================================================================


@router.get("/users", response_model=list[UserResponse])
async def list_users(
    admin: CurrentAdmin = Depends(get_current_admin),
    db: AsyncSession = Depends(get_db),
) -> list[UserResponse]:
    """Latest registered students, without credentials."""
    users = await service.list_users(db)
    return [UserResponse.model_validate(u) for u in users]


@router.get("/applications", response_model=list[ApplicationRecordResponse])
async def list_applications(
    user_id: str | None = Query(None, description="Only this student's applications"),
    admin: CurrentAdmin = Depends(get_current_admin),
    db: AsyncSession = Depends(get_db),
) -> list[ApplicationRecordResponse]:
    records = await applications.list_applications(db, user_id=user_id)
    return [ApplicationRecordResponse.model_validate(r) for r in records]


@router.get("/audit-logs", response_model=list[AuditLogResponse])
async def list_audit_logs(
    admin: CurrentAdmin = Depends(get_current_admin),
    db: AsyncSession = Depends(get_db),
) -> list[AuditLogResponse]:
    logs = await service.list_audit_logs(db)
    return [AuditLogResponse.model_validate(log) for log in logs]


@router.post("/institutions/sync", response_model=CourseSyncResponse)
async def sync_courses(
    request: Request,
    body: CourseSyncRequest,
    admin: CurrentAdmin = Depends(require_super_admin),
    db: AsyncSession = Depends(get_db),
) -> CourseSyncResponse:
    """
    Pull the latest course lists into the catalogue.

    Raises:
        HTTPException 404: Unknown institution id
    """
    try:
        synced = await institutions.sync_courses(
            db,
            body.institution_id,
            actor_id=str(admin.id),
            ip_address=client_ip(request),
        )
    except InstitutionServiceError as e:
        raise _to_http(e) from e
    logger.info(f"Admin {admin.email} synced courses for {len(synced)} institution(s)")
    return CourseSyncResponse(synced=synced)


@router.get("/jobs")
async def list_jobs(admin: CurrentAdmin = Depends(get_current_admin)) -> dict:
    jobs = list_registered_jobs()
    return {"jobs": jobs, "count": len(jobs)}


@router.post("/jobs/{job_id}/trigger", response_model=JobTriggerResponse)
async def trigger_job(
    job_id: str,
    admin: CurrentAdmin = Depends(require_super_admin),
) -> JobTriggerResponse:
    try:
        result = await trigger_job_manually(job_id)
    except ValueError as e:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail={"error": "JOB_NOT_FOUND", "message": str(e)},
        ) from e
    return JobTriggerResponse(**result)
