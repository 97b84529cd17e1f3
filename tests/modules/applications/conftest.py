"""
Application test fixtures.
"""

import pytest

from eduhub.modules.applications.drafts import InMemoryDraftStore
from eduhub.modules.applications.wizard import ApplicantIdentity, ApplicationWizard
from eduhub.modules.institutions.catalog import INSTITUTIONS

CATALOGUE = {institution.id: institution for institution in INSTITUTIONS}

OWNER = "5f0c3a52-9f1e-4c4b-9a53-4b1f0f7d2a11"


@pytest.fixture
def store():
    return InMemoryDraftStore()


@pytest.fixture
def identity():
    return ApplicantIdentity(
        first_name="Thabo",
        last_name="Nkosi",
        email="thabo@test.com",
        id_number="0502125678089",
        phone="0721234567",
    )


@pytest.fixture
def wizard(store, identity):
    return ApplicationWizard(store, OWNER, identity=identity, institutions=CATALOGUE)
