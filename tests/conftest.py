import pytest
import requests
from django.conf import settings as django_settings
from django.urls import reverse

from accounts import services as account_services
from accounts.models import AuthResult, User
from catalog import services as catalog_services
from catalog.models import College, Department, School, Supervisor

STUDENT = User(
    id="u1",
    first_name="Ada",
    last_name="Lovelace",
    email="ada@example.com",
    role="STUDENT",
    school_id="S1",
)

SCHOOLS = [School(id="S0", name="School of Arts"), School(id="S1", name="School of Engineering")]
COLLEGES = [
    College(id="C1", name="College of Computing", school_id="S1", projects=12),
    College(id="C2", name="College of Design", school_id="S1", projects=3),
]
DEPARTMENTS = {
    "C1": [Department(id="D1", name="Computer Science", projects=12)],
    "C2": [Department(id="D2", name="Industrial Design", projects=3)],
}
SUPERVISORS = {
    "D1": [Supervisor(id="SUP1", name="Dr. Hopper", department_id="D1")],
    "D2": [Supervisor(id="SUP2", name="Dr. Rams", department_id="D2")],
}


@pytest.fixture(autouse=True)
def no_network(monkeypatch):
    def refuse(self, method, url, *args, **kwargs):
        raise AssertionError(f"Unexpected network call: {method} {url}")

    monkeypatch.setattr(requests.sessions.Session, "request", refuse)


@pytest.fixture(autouse=True)
def media_root(settings, tmp_path):
    settings.MEDIA_ROOT = tmp_path
    settings.UPLOAD_URL = "https://media.example.com/upload"
    return tmp_path


@pytest.fixture
def backend(monkeypatch):
    """Canned reference data in place of the REST backend."""
    monkeypatch.setattr(catalog_services, "list_schools", lambda api: SCHOOLS)
    monkeypatch.setattr(catalog_services, "list_colleges", lambda api, school_id: COLLEGES)
    monkeypatch.setattr(
        catalog_services,
        "list_departments",
        lambda api, school_id, college_id: DEPARTMENTS.get(college_id, []),
    )
    monkeypatch.setattr(
        catalog_services,
        "list_supervisors",
        lambda api, department_id: SUPERVISORS.get(department_id, []),
    )


@pytest.fixture
def signed_in(client, monkeypatch, backend):
    monkeypatch.setattr(
        account_services,
        "login",
        lambda api, email, password: AuthResult(token="tok-1", user=STUDENT),
    )
    response = client.post(
        reverse("accounts:login"),
        {"email": STUDENT.email, "password": "secret"},
    )
    assert response.status_code == 302
    return client


@pytest.fixture
def put_session(client):
    """Write a value straight into the signed session cookie of `client`."""

    def put(key, value):
        session = client.session
        session[key] = value
        session.save()
        client.cookies[django_settings.SESSION_COOKIE_NAME] = session.session_key

    return put
