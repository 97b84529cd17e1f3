from fastapi import APIRouter

from eduhub.modules.admins import router as admins_router
from eduhub.modules.applications import router as applications_router
from eduhub.modules.assistant import router as assistant_router
from eduhub.modules.auth import router as auth_router
from eduhub.modules.eligibility import router as eligibility_router
from eduhub.modules.institutions import router as institutions_router

api_router = APIRouter()

api_router.include_router(auth_router, prefix="/auth", tags=["Authentication"])

api_router.include_router(institutions_router, prefix="/institutions", tags=["Institutions"])

api_router.include_router(eligibility_router, prefix="/eligibility", tags=["Eligibility"])

api_router.include_router(applications_router, prefix="/applications", tags=["Applications"])

api_router.include_router(assistant_router, prefix="/assistant", tags=["Assistant"])

api_router.include_router(admins_router, prefix="/admin", tags=["Admin"])
