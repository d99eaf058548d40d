from django.urls import path

from .api import DepartmentOptionsView, SupervisorOptionsView
from .views import (
    college_list,
    department_list,
    project_detail,
    project_edit,
    project_list,
    project_wizard,
    school_dashboard,
)

app_name = "catalog"

DEPARTMENT = "school/<str:school_id>/college/<str:college_id>/department/<str:department_id>"

urlpatterns = [
    path("school/<str:school_id>/", school_dashboard, name="school_dashboard"),
    path("school/<str:school_id>/college/", college_list, name="college_list"),
    path(
        "school/<str:school_id>/college/<str:college_id>/department/",
        department_list,
        name="department_list",
    ),
    path(f"{DEPARTMENT}/projects/", project_list, name="project_list"),
    path(
        f"{DEPARTMENT}/project/<str:project_id>/",
        project_detail,
        name="project_detail",
    ),
    path(
        f"{DEPARTMENT}/project/<str:project_id>/edit/",
        project_edit,
        name="project_edit",
    ),
    path("school/<str:school_id>/project/new/", project_wizard, name="project_wizard"),
]

urlpatterns += [
    path(
        "api/school/<str:school_id>/college/<str:college_id>/departments/",
        DepartmentOptionsView.as_view(),
        name="department_options",
    ),
    path(
        "api/department/<str:department_id>/supervisors/",
        SupervisorOptionsView.as_view(),
        name="supervisor_options",
    ),
]
