import pytest

from accounts import services as account_services
from catalog import services
from catalog.client import ApiError
from catalog.models import Project


class FakeClient:
    def __init__(self, body):
        self.body = body
        self.calls = []

    def get(self, path, params=None):
        self.calls.append(("GET", path, None))
        return self.body

    def post(self, path, json=None):
        self.calls.append(("POST", path, json))
        return self.body

    def patch(self, path, json=None):
        self.calls.append(("PATCH", path, json))
        return self.body


def test_college_sums_department_counts():
    client = FakeClient({"data": [{
        "id": "C1",
        "name": "College of Computing",
        "schoolId": "S1",
        "departments": [{"_count": {"projects": 4}}, {"_count": {"projects": 3}}, {}],
    }]})
    [college] = services.list_colleges(client, "S1")
    assert college.projects == 7
    assert client.calls == [("GET", "/school/S1/college", None)]


def test_supervisors_come_from_their_own_key():
    client = FakeClient({"supervisors": [{"id": 5, "name": "Dr. Hopper", "departmentId": "D1"}]})
    [supervisor] = services.list_supervisors(client, "D1")
    assert supervisor.id == "5"
    assert client.calls[0][1] == "/school/project/department/D1/supervisors"


def test_get_department_picks_from_list():
    client = FakeClient({"data": [{"id": "D1", "name": "CS"}, {"id": "D2", "name": "EE"}]})
    assert services.get_department(client, "S1", "C1", "D2").name == "EE"
    assert services.get_department(client, "S1", "C1", "D9") is None


@pytest.mark.parametrize("body", [{"data": {"id": "P1"}}, {"id": "P1"}])
def test_create_project_returns_new_id(body):
    client = FakeClient(body)
    assert services.create_project(client, "S1", {"title": "Thesis A"}) == "P1"
    assert client.calls == [("POST", "/school/S1/project", {"title": "Thesis A"})]


def test_create_project_without_id_fails():
    with pytest.raises(ApiError) as excinfo:
        services.create_project(FakeClient({"data": {}}), "S1", {})
    assert excinfo.value.message == "Project creation failed - no ID returned"


def test_update_project_patches():
    client = FakeClient(None)
    services.update_project(client, "S1", "P1", {"title": "New"})
    assert client.calls == [("PATCH", "/school/S1/project/P1", {"title": "New"})]


def test_related_projects_detailed_path():
    client = FakeClient({"data": [{"id": "P2", "title": "Other", "authors": [{"firstName": "Grace", "lastName": "Hopper"}]}]})
    [related] = services.related_projects(client, "S1", "P1", detailed=True)
    assert client.calls[0][1] == "/school/S1/project/P1/related/detailed"
    assert related.author == "Grace Hopper"


def test_project_tags_accept_strings_and_objects():
    project = Project.from_api({
        "id": "P1",
        "title": "Thesis A",
        "year": 2024,
        "tags": ["IoT", {"name": "Machine Learning"}],
        "files": [
            {"filename": "a.docx", "mimetype": "application/msword", "size": 2048, "path": "https://x/a"},
            {"filename": "a.pdf", "mimetype": "application/pdf", "size": 1536, "path": "https://x/b"},
        ],
        "updatedAt": "2024-03-05T10:00:00.000Z",
    })
    assert project.tags == ("IoT", "Machine Learning")
    assert project.main_pdf.filename == "a.pdf"
    assert project.files[1].size_kb == "1.5"
    assert project.author_names == "Unknown"
    assert project.updated_display == "March 5, 2024"
    assert project.views == 0


def test_login_requires_token_and_user():
    client = FakeClient({"token": "tok-1"})
    with pytest.raises(ApiError):
        account_services.login(client, "a@b.c", "pw")


def test_register_returns_session():
    client = FakeClient({"token": "tok-1", "user": {"id": "u1", "firstName": "Ada", "schoolId": "S1"}})
    result = account_services.register(client, {"email": "a@b.c"})
    assert result.token == "tok-1"
    assert result.user.school_id == "S1"
    assert client.calls[0][:2] == ("POST", "/auth/register")


def test_related_project_carries_its_college():
    client = FakeClient({"data": [
        {"id": "P2", "title": "Other", "departmentId": "D2", "collegeId": "C2"},
        {"id": "P3", "title": "Nested", "department": {"id": "D3", "collegeId": "C3"}},
    ]})
    first, second = services.related_projects(client, "S1", "P1")
    assert (first.college_id, first.department_id) == ("C2", "D2")
    assert (second.college_id, second.department_id) == ("C3", "D3")
