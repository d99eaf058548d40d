from .client import ApiError
from .models import College, Department, Project, RelatedProject, School, Supervisor


def _items(body, key="data"):
    if isinstance(body, dict):
        body = body.get(key)
    return body or []


#-------------------------
#   Schools and colleges
#-------------------------

def list_schools(client):
    return [School.from_api(s) for s in _items(client.get("/school"))]


def list_colleges(client, school_id):
    body = client.get(f"/school/{school_id}/college")
    return [College.from_api(c) for c in _items(body)]


def get_college(client, school_id, college_id):
    return next(
        (c for c in list_colleges(client, school_id) if c.id == college_id),
        None,
    )


#-------------------------
#   Departments
#-------------------------

def list_departments(client, school_id, college_id):
    body = client.get(f"/school/{school_id}/college/{college_id}/departments")
    return [Department.from_api(d) for d in _items(body)]


def get_department(client, school_id, college_id, department_id):
    return next(
        (
            d for d in list_departments(client, school_id, college_id)
            if d.id == department_id
        ),
        None,
    )


def list_supervisors(client, department_id):
    body = client.get(f"/school/project/department/{department_id}/supervisors")
    return [Supervisor.from_api(s) for s in _items(body, "supervisors")]


#-------------------------
#   Projects
#-------------------------

def _project_path(school_id, college_id, department_id):
    return f"/school/{school_id}/college/{college_id}/department/{department_id}/project"


def list_projects(client, school_id, college_id, department_id):
    body = client.get(_project_path(school_id, college_id, department_id))
    return [Project.from_api(p) for p in _items(body)]


def get_project(client, school_id, college_id, department_id, project_id):
    body = client.get(f"{_project_path(school_id, college_id, department_id)}/{project_id}")
    if not body:
        return None
    return Project.from_api(body)


def create_project(client, school_id, payload):
    """Create a project and return the id the backend assigned to it."""
    body = client.post(f"/school/{school_id}/project", json=payload) or {}
    data = body.get("data") if isinstance(body.get("data"), dict) else body
    project_id = data.get("id")
    if not project_id:
        raise ApiError("Project creation failed - no ID returned", payload=body)
    return str(project_id)


def update_project(client, school_id, project_id, payload):
    return client.patch(f"/school/{school_id}/project/{project_id}", json=payload)


def related_projects(client, school_id, project_id, detailed=False):
    path = f"/school/{school_id}/project/{project_id}/related"
    if detailed:
        path += "/detailed"
    return [RelatedProject.from_api(p) for p in _items(client.get(path))]


#-------------------------
#   Files
#-------------------------

def create_file(client, payload):
    return client.post("/file", json=payload)
