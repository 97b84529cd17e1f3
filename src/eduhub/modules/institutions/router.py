"""
Institutions Router

Public browsing endpoints.

Endpoints:
- GET /institutions - Search by name/location and filter by type
- GET /institutions/types - Available institution types
- GET /institutions/{id} - One institution, including synced courses
"""

from fastapi import APIRouter, Depends, HTTPException, Query
from sqlalchemy.ext.asyncio import AsyncSession

from eduhub.core.database import get_db
from eduhub.modules.institutions import service
from eduhub.modules.institutions.catalog import InstitutionType
from eduhub.modules.institutions.schemas import InstitutionListResponse, InstitutionResponse
from eduhub.modules.institutions.service import InstitutionServiceError

router = APIRouter()


@router.get("", response_model=InstitutionListResponse)
async def list_institutions(
    q: str = Query("", max_length=100, description="Matches name or location"),
    type: str = Query("All", description="'All' or an institution type"),
) -> InstitutionListResponse:
    items = [InstitutionResponse.from_institution(i) for i in service.search_institutions(q, type)]
    return InstitutionListResponse(items=items, total=len(items))


@router.get("/types", response_model=list[str])
async def list_institution_types() -> list[str]:
    return ["All", *(t.value for t in InstitutionType)]


@router.get("/{institution_id}", response_model=InstitutionResponse)
async def get_institution(
    institution_id: str,
    db: AsyncSession = Depends(get_db),
) -> InstitutionResponse:
    try:
        institution = await service.get_institution(db, institution_id)
    except InstitutionServiceError as e:
        raise HTTPException(
            status_code=e.status_code,
            detail={"error": e.error_code, "message": e.message},
        ) from e
    return InstitutionResponse.from_institution(institution)
