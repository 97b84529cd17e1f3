"""
Institutions Schemas

Response models built from the catalogue dataclasses.
"""

from pydantic import BaseModel, Field

from eduhub.modules.institutions.catalog import Institution, InstitutionType


class CourseResponse(BaseModel):
    name: str
    prerequisites: list[str]


class ContactResponse(BaseModel):
    phone: str
    email: str
    website: str


class InstitutionResponse(BaseModel):
    id: str
    name: str
    type: InstitutionType
    location: str
    description: str
    logo_url: str
    contact: ContactResponse
    courses: list[CourseResponse]

    @classmethod
    def from_institution(cls, institution: Institution) -> "InstitutionResponse":
        return cls(
            id=institution.id,
            name=institution.name,
            type=institution.type,
            location=institution.location,
            description=institution.description,
            logo_url=institution.logo_url,
            contact=ContactResponse(
                phone=institution.contact.phone,
                email=institution.contact.email,
                website=institution.contact.website,
            ),
            courses=[
                CourseResponse(name=c.name, prerequisites=list(c.prerequisites))
                for c in institution.courses
            ],
        )


class InstitutionListResponse(BaseModel):
    items: list[InstitutionResponse]
    total: int


class CourseSyncRequest(BaseModel):
    institution_id: str | None = Field(None, description="Omit to sync every institution")


class CourseSyncResponse(BaseModel):
    synced: dict[str, list[str]]
