"""
Institution Catalogue

Static reference data: the institutions students can apply to, and the
closed option lists used by the application form.
"""

import enum
from dataclasses import dataclass, field


class InstitutionType(str, enum.Enum):
    UNIVERSITY = "University"
    TECHNICAL_UNIVERSITY = "University of Technology"
    TVET = "TVET College"
    PRIVATE_COLLEGE = "Private College"


@dataclass(frozen=True)
class Course:
    name: str
    prerequisites: tuple[str, ...] = ()


@dataclass(frozen=True)
class Contact:
    phone: str
    email: str
    website: str


@dataclass(frozen=True)
class Institution:
    id: str
    name: str
    type: InstitutionType
    location: str
    description: str
    logo_url: str
    contact: Contact
    courses: tuple[Course, ...] = field(default_factory=tuple)


def _logo(domain: str) -> str:
    return f"https://logo.clearbit.com/{domain}?size=200"


GENDERS = ("Male", "Female", "Non-Binary", "Prefer not to say")

ETHNICITIES = ("Black African", "Coloured", "Indian/Asian", "White", "Other")

PRONOUNS = ("He/Him", "She/Her", "They/Them", "Prefer not to say", "Other")

PROVINCES = (
    "Eastern Cape",
    "Free State",
    "Gauteng",
    "KwaZulu-Natal",
    "Limpopo",
    "Mpumalanga",
    "Northern Cape",
    "North West",
    "Western Cape",
)

MATRIC_SUBJECTS = (
    "Accounting",
    "Agricultural Management Practices",
    "Agricultural Sciences",
    "Agricultural Technology",
    "Business Studies",
    "Civil Technology",
    "Computer Applications Technology",
    "Consumer Studies",
    "Dance Studies",
    "Design",
    "Dramatic Arts",
    "Economics",
    "Electrical Technology",
    "Engineering Graphics and Design",
    "English Home Language",
    "English First Additional Language",
    "Geography",
    "History",
    "Hospitality Studies",
    "Information Technology",
    "IsiNdebele",
    "IsiXhosa",
    "IsiZulu",
    "Life Orientation",
    "Life Sciences",
    "Mathematical Literacy",
    "Mathematics",
    "Mechanical Technology",
    "Music",
    "Physical Sciences",
    "Religion Studies",
    "Sepedi",
    "Sesotho",
    "Setswana",
    "Siswati",
    "Technical Mathematics",
    "Technical Sciences",
    "Tourism",
    "Tshivenda",
    "Visual Arts",
    "Xitsonga",
)

INSTITUTIONS: tuple[Institution, ...] = (
    Institution(
        id="uct",
        name="University of Cape Town",
        type=InstitutionType.UNIVERSITY,
        location="Western Cape",
        description="South Africa's oldest university, renowned for research and academic excellence.",
        logo_url=_logo("uct.ac.za"),
        contact=Contact("+27 21 650 9111", "admissions@uct.ac.za", "www.uct.ac.za"),
        courses=(
            Course("BSc Computer Science", ("Mathematics > 70%", "Physical Sciences > 60%")),
            Course(
                "MBChB Medicine",
                ("Mathematics > 80%", "Physical Sciences > 70%", "Life Sciences > 70%"),
            ),
            Course("BCom Accounting", ("Mathematics > 60%", "English > 60%")),
            Course("LLB Law", ("English > 70%", "NBT Score > Proficient")),
        ),
    ),
    Institution(
        id="wits",
        name="University of the Witwatersrand",
        type=InstitutionType.UNIVERSITY,
        location="Gauteng",
        description=(
            "A multi-campus South African public research university situated in the "
            "northern areas of central Johannesburg."
        ),
        logo_url=_logo("wits.ac.za"),
        contact=Contact("+27 11 717 1000", "study@wits.ac.za", "www.wits.ac.za"),
        courses=(
            Course("BSc Engineering", ("Mathematics > 70%", "Physical Sciences > 70%")),
            Course("BA Arts", ("English > 60%",)),
            Course("BSc Actuarial Science", ("Mathematics > 80%",)),
            Course("Bachelor of Architecture", ("Mathematics > 50%", "Portfolio Submission")),
        ),
    ),
    Institution(
        id="uj",
        name="University of Johannesburg",
        type=InstitutionType.UNIVERSITY,
        location="Gauteng",
        description="A vibrant, multicultural and dynamic comprehensive university.",
        logo_url=_logo("uj.ac.za"),
        contact=Contact("+27 11 559 4555", "mylife@uj.ac.za", "www.uj.ac.za"),
        courses=(
            Course("BTech Transport Management", ("Mathematical Literacy > 50%",)),
            Course("BCom Finance", ("Mathematics > 60%",)),
            Course("BA Design", ("English > 50%", "Portfolio")),
            Course("BSc IT", ("Mathematics > 60%",)),
        ),
    ),
    Institution(
        id="tut",
        name="Tshwane University of Technology",
        type=InstitutionType.TECHNICAL_UNIVERSITY,
        location="Gauteng",
        description="The largest residential higher education institution in South Africa.",
        logo_url=_logo("tut.ac.za"),
        contact=Contact("+27 86 110 2421", "general@tut.ac.za", "www.tut.ac.za"),
        courses=(
            Course("Diploma in IT", ("Mathematics > 40% or Mathematical Literacy > 60%",)),
            Course("BTech Nursing", ("Life Sciences > 50%", "English > 50%")),
            Course(
                "National Diploma in Engineering",
                ("Mathematics > 50%", "Physical Sciences > 50%"),
            ),
        ),
    ),
    Institution(
        id="majuba",
        name="Majuba TVET College",
        type=InstitutionType.TVET,
        location="KwaZulu-Natal",
        description="Empowering students with vocational skills for the modern economy.",
        logo_url=_logo("majuba.edu.za"),
        contact=Contact("+27 34 326 4888", "info@majuba.edu.za", "www.majuba.edu.za"),
        courses=(
            Course("NCV Engineering", ("Grade 9 Pass",)),
            Course("NATED Business Management", ("Grade 12 Pass",)),
            Course("Hospitality", ("Grade 10 Pass",)),
        ),
    ),
    Institution(
        id="up",
        name="University of Pretoria",
        type=InstitutionType.UNIVERSITY,
        location="Gauteng",
        description=(
            "One of Africa's top universities and the largest contact university in South Africa."
        ),
        logo_url=_logo("up.ac.za"),
        contact=Contact("+27 12 420 3111", "ssc@up.ac.za", "www.up.ac.za"),
        courses=(
            Course("BVSc Veterinary Science", ("Mathematics > 70%", "Physical Sciences > 60%")),
            Course("BEng Civil", ("Mathematics > 70%", "Physical Sciences > 70%")),
            Course("BCom Economics", ("Mathematics > 60%",)),
        ),
    ),
    Institution(
        id="cput",
        name="Cape Peninsula University of Technology",
        type=InstitutionType.TECHNICAL_UNIVERSITY,
        location="Western Cape",
        description="The only university of technology in the Western Cape.",
        logo_url=_logo("cput.ac.za"),
        contact=Contact("+27 21 959 6767", "info@cput.ac.za", "www.cput.ac.za"),
        courses=(
            Course(
                "Diploma in Maritime Studies", ("Mathematics > 50%", "Physical Sciences > 50%")
            ),
            Course("BTech Radiography", ("Mathematics > 50%", "Life Sciences > 60%")),
            Course("Diploma in Agriculture", ("Life Sciences > 50%",)),
        ),
    ),
)

_BY_ID = {institution.id: institution for institution in INSTITUTIONS}


def get_static_institution(institution_id: str) -> Institution | None:
    return _BY_ID.get(institution_id)


def filter_institutions(query: str = "", institution_type: str = "All") -> list[Institution]:
    """
    Free-text and type filter over the catalogue.

    The query matches name or location case-insensitively; a type of
    "All" (or empty) disables the type filter.
    """
    needle = query.strip().lower()
    results = []
    for institution in INSTITUTIONS:
        if needle and needle not in institution.name.lower() and needle not in institution.location.lower():
            continue
        if institution_type and institution_type != "All" and institution.type.value != institution_type:
            continue
        results.append(institution)
    return results
