"""
Unit tests for mail draft generation.
"""

from urllib.parse import unquote

from eduhub.core.config import settings
from eduhub.modules.applications.mail import (
    DEFAULT_COURSE,
    build_mail_link,
    build_mail_links,
    encode_component,
)
from eduhub.modules.applications.schemas import FormData
from eduhub.modules.institutions.catalog import get_static_institution


def form(**overrides) -> FormData:
    values = {
        "first_name": "Thabo",
        "last_name": "Nkosi",
        "id_number": "0502125678089",
        "email": "thabo@test.com",
        "phone": "0721234567",
        "pronouns": "He/Him",
        "gender": "Male",
        "subjects": [{"name": "Mathematics", "percentage": 78}, {"name": "English", "percentage": 82}],
        "selected_institutions": ["uct"],
        "selected_courses": {"uct": "LLB Law"},
    }
    values.update(overrides)
    return FormData(**values)


class TestEncodeComponent:
    def test_matches_uri_component_encoding(self):
        assert encode_component("a b&c=d") == "a%20b%26c%3Dd"
        assert encode_component("(Law)!") == "(Law)!"
        assert encode_component("line\nbreak") == "line%0Abreak"


class TestBuildMailLink:
    def test_subject_and_recipient(self):
        link = build_mail_link(form(), "uct", get_static_institution("uct"))

        assert link.subject == "Application: LLB Law - Nkosi Thabo (0502125678089)"
        assert link.recipient == "admissions@uct.ac.za"
        assert link.url.startswith("mailto:admissions@uct.ac.za?subject=Application%3A%20LLB%20Law")

    def test_body_lists_marks_and_funding(self):
        body = build_mail_link(form(), "uct", get_static_institution("uct")).body

        assert body.startswith("Dear Admissions Team at University of Cape Town,")
        assert "- Mathematics: 78%\n- English: 82%" in body
        assert "NSFAS Status: Applying for Funding" in body
        assert body.endswith("Kind regards,\nThabo Nkosi")

    def test_self_funded(self):
        body = build_mail_link(form(nsfas_required=False), "uct", get_static_institution("uct")).body
        assert "NSFAS Status: Self-Funded" in body

    def test_url_decodes_back_to_body(self):
        link = build_mail_link(form(), "uct", get_static_institution("uct"))
        encoded_body = link.url.split("&body=", 1)[1]
        assert unquote(encoded_body) == link.body

    def test_fallbacks_for_unknown_institution(self):
        link = build_mail_link(form(selected_institutions=["ghost"], selected_courses={}), "ghost", None)

        assert link.recipient == settings.default_institution_email
        assert link.institution_name == "ghost"
        assert link.course == DEFAULT_COURSE


class TestBuildMailLinks:
    def test_one_link_per_basket_entry_in_order(self):
        data = form(selected_institutions=["wits", "uct"], selected_courses={})
        institutions = {i: get_static_institution(i) for i in ("uct", "wits")}

        links = build_mail_links(data, institutions)

        assert [link.institution_id for link in links] == ["wits", "uct"]
