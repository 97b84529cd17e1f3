"""
Outbound application emails.

Documents cannot be attached to a ``mailto:`` link, so the student sends
each generated draft from their own mail client and attaches the files
by hand.
"""

from urllib.parse import quote

from eduhub.core.config import settings
from eduhub.modules.applications.schemas import FormData, MailLinkResponse
from eduhub.modules.institutions.catalog import Institution

DEFAULT_COURSE = "Course Application"

# Characters encodeURIComponent leaves alone
_URI_SAFE = "-_.!~*'()"

_BODY_TEMPLATE = """Dear Admissions Team at {institution},

I would like to submit my application for the {course} for the upcoming academic year.

APPLICANT DETAILS:
Name: {first_name} {last_name}
ID Number: {id_number}
Phone: {phone}
Email: {email}
Pronouns: {pronouns}
Gender: {gender}
NSFAS Status: {nsfas_status}

ACADEMIC SUMMARY (Grade 11/12):
{marks}

ATTACHMENTS:
Please find my certified ID Copy, Academic Results, and other supporting documents attached to this email.

Kind regards,
{first_name} {last_name}"""


def encode_component(value: str) -> str:
    return quote(value, safe=_URI_SAFE)


def build_subject(form: FormData, course: str) -> str:
    return f"Application: {course} - {form.last_name} {form.first_name} ({form.id_number})"


def build_body(form: FormData, institution_name: str, course: str) -> str:
    marks = "\n".join(f"- {s.name}: {s.percentage}%" for s in form.subjects)
    return _BODY_TEMPLATE.format(
        institution=institution_name,
        course=course,
        first_name=form.first_name,
        last_name=form.last_name,
        id_number=form.id_number,
        phone=form.phone,
        email=form.email,
        pronouns=form.pronouns,
        gender=form.gender,
        nsfas_status="Applying for Funding" if form.nsfas_required else "Self-Funded",
        marks=marks,
    )


def build_mail_link(
    form: FormData, institution_id: str, institution: Institution | None
) -> MailLinkResponse:
    course = form.selected_courses.get(institution_id) or DEFAULT_COURSE
    recipient = (
        institution.contact.email
        if institution is not None and institution.contact.email
        else settings.default_institution_email
    )
    institution_name = institution.name if institution is not None else institution_id

    subject = build_subject(form, course)
    body = build_body(form, institution_name, course)
    url = f"mailto:{recipient}?subject={encode_component(subject)}&body={encode_component(body)}"

    return MailLinkResponse(
        institution_id=institution_id,
        institution_name=institution_name,
        course=course,
        recipient=recipient,
        subject=subject,
        body=body,
        url=url,
    )


def build_mail_links(
    form: FormData, institutions: dict[str, Institution]
) -> list[MailLinkResponse]:
    """One draft per basket entry, in basket order."""
    return [
        build_mail_link(form, institution_id, institutions.get(institution_id))
        for institution_id in form.selected_institutions
    ]
