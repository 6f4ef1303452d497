"""
Pytest configuration and shared fixtures for the Virtual CV test suite.

Bearer tokens are real HS256 JWTs signed with a static test key; the
``auth_settings`` fixture points the token verifier at that key so the
whole write path (middleware, verifier, gate) runs unmocked.
"""
import pytest

from cvnodes.forms import (
    CreateCategoryCommand,
    CreateItemCommand,
    CreateProfileCommand,
    CreateSkillCommand,
    CreateSkillGroupCommand,
)
from cvnodes.services import HierarchyService
from tests.utils import ALLOWED_EMAIL, TEST_AUDIENCE, TEST_ISSUER, TEST_KEY, bearer, mint_token


@pytest.fixture(autouse=True)
def auth_settings(settings):
    """Verify tokens against the static test key and allow one email."""
    settings.AUTH_JWT_KEY = TEST_KEY
    settings.AUTH_JWT_ALGORITHMS = ["HS256"]
    settings.AUTH_JWT_ISSUER = TEST_ISSUER
    settings.AUTH_JWT_AUDIENCE = TEST_AUDIENCE
    settings.AUTH_ALLOWED_EMAILS = ["Allowed@Example.com"]
    return settings


@pytest.fixture
def auth_header():
    """Authorization header of a verified, allow-listed user."""
    return bearer(mint_token(email=ALLOWED_EMAIL, email_verified=True))


@pytest.fixture
def service():
    return HierarchyService()


@pytest.fixture
def cv_tree(db, service):
    """A small CV: profile -> experience -> acme job, profile -> backend -> python."""
    service.create(
        CreateProfileCommand(
            {"id": "profile", "label": "Jane Doe", "name": "Jane Doe", "title": "Engineer"}
        )
    )
    service.create(
        CreateCategoryCommand(
            {"id": "experience", "parentId": "profile", "label": "Experience", "sectionId": "experience"}
        )
    )
    service.create(
        CreateItemCommand(
            {
                "id": "acme",
                "parentId": "experience",
                "label": "Backend Developer",
                "description": "Services written with Java",
                "company": "Acme",
                "highlights": ["Built the billing API"],
            }
        )
    )
    service.create(
        CreateSkillGroupCommand(
            {"id": "backend", "parentId": "profile", "label": "Backend", "proficiencyLevel": "expert"}
        )
    )
    service.create(
        CreateSkillCommand(
            {"id": "python", "parentId": "backend", "label": "Python", "yearsOfExperience": 8}
        )
    )
    return service
