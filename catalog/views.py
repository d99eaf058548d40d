import logging
from datetime import date
from urllib.parse import quote, urlencode

from django.contrib import messages
from django.shortcuts import redirect, render
from django.urls import reverse
from rest_framework.exceptions import ValidationError

from accounts.decorators import token_required

from . import services, uploads, wizard
from .client import ApiError, Unauthorized
from .forms import (
    ProjectDetailsForm,
    ProjectFileForm,
    form_data,
    posted_selection,
    rendered_selection,
)
from .listing import (
    DEPARTMENT_TAGS,
    filter_projects,
    hashtag,
    project_years,
    search_by_name,
    selected_tags,
)
from .models import Department, ProjectTab, SortOrder
from .selection import Selection, reconcile
from .serializers import FilePayloadSerializer, ProjectPayloadSerializer, validated_payload

logger = logging.getLogger(__name__)

WIZARD_KEY = "project_wizard"
CLOSE_CONFIRMATION = "Are you sure you want to close? All your progress will be lost."


def fetch(request, service, *args, default=None, **kwargs):
    """Call a backend service, turning API failures into a flash message."""
    try:
        return service(request.api, *args, **kwargs)
    except Unauthorized:
        raise
    except ApiError as exc:
        messages.error(request, exc.message)
        return default


def crumb(label, url):
    return {"label": label or "...", "url": url}


def school_crumbs(request, school_id):
    return [
        crumb(
            request.store.school_name or "",
            reverse("catalog:college_list", kwargs={"school_id": school_id}),
        )
    ]




#-------------------------
#   Browsing
#-------------------------

@token_required
def school_dashboard(request, school_id):
    return redirect("catalog:college_list", school_id=school_id)


@token_required
def college_list(request, school_id):
    colleges = fetch(request, services.list_colleges, school_id, default=[])
    query = request.GET.get("q", "")

    return render(
        request,
        "catalog/college_list.html",
        {
            "school_id": school_id,
            "colleges": search_by_name(colleges, query),
            "query": query,
            "breadcrumbs": school_crumbs(request, school_id),
        }
    )


def tag_links(query, active):
    links = []
    for tag in DEPARTMENT_TAGS:
        toggled = [t for t in active if t != tag] if tag in active else active + [tag]
        params = [("tag", t) for t in toggled]
        if query:
            params.insert(0, ("q", query))
        links.append({
            "label": hashtag(tag),
            "active": tag in active,
            "href": "?" + urlencode(params),
        })
    return links


@token_required
def department_list(request, school_id, college_id):
    college = fetch(request, services.get_college, school_id, college_id)
    departments = fetch(
        request, services.list_departments, school_id, college_id, default=[]
    )
    query = request.GET.get("q", "")
    # Tag picks only live in the page's query string; the backend never sees them.
    active_tags = selected_tags(request.GET.getlist("tag"))

    breadcrumbs = school_crumbs(request, school_id) + [
        crumb(
            college.name if college else None,
            reverse("catalog:college_list", kwargs={"school_id": school_id}),
        ),
        crumb("Departments", request.path),
    ]

    return render(
        request,
        "catalog/department_list.html",
        {
            "school_id": school_id,
            "college_id": college_id,
            "college": college,
            "departments": search_by_name(departments, query),
            "query": query,
            "tags": tag_links(query, active_tags),
            "active_tags": [hashtag(t) for t in active_tags],
            "clear_tags_href": "?" + urlencode({"q": query}) if query else "?",
            "breadcrumbs": breadcrumbs,
        }
    )


def department_crumbs(request, school_id, college_id, department_id):
    college = fetch(request, services.get_college, school_id, college_id)
    department = fetch(
        request, services.get_department, school_id, college_id, department_id
    )
    breadcrumbs = school_crumbs(request, school_id) + [
        crumb(
            college.name if college else None,
            reverse("catalog:college_list", kwargs={"school_id": school_id}),
        ),
        crumb(
            department.name if department else None,
            reverse(
                "catalog:department_list",
                kwargs={"school_id": school_id, "college_id": college_id},
            ),
        ),
        crumb(
            "Projects",
            reverse(
                "catalog:project_list",
                kwargs={
                    "school_id": school_id,
                    "college_id": college_id,
                    "department_id": department_id,
                },
            ),
        ),
    ]
    return department, breadcrumbs


@token_required
def project_list(request, school_id, college_id, department_id):
    department, breadcrumbs = department_crumbs(
        request, school_id, college_id, department_id
    )
    projects = fetch(
        request,
        services.list_projects,
        school_id,
        college_id,
        department_id,
        default=[],
    )

    query = request.GET.get("q", "")
    year = request.GET.get("year", "all")
    sort = request.GET.get("sort", SortOrder.NEWEST)
    if sort not in SortOrder.values:
        sort = SortOrder.NEWEST

    return render(
        request,
        "catalog/project_list.html",
        {
            "school_id": school_id,
            "college_id": college_id,
            "department_id": department_id,
            "department": department,
            "projects": filter_projects(projects, query=query, year=year, sort=sort),
            "years": project_years(projects),
            "query": query,
            "year": year,
            "sort": sort,
            "sort_choices": SortOrder.choices,
            "breadcrumbs": breadcrumbs,
        }
    )


@token_required
def project_detail(request, school_id, college_id, department_id, project_id):
    department, breadcrumbs = department_crumbs(
        request, school_id, college_id, department_id
    )
    project = fetch(
        request,
        services.get_project,
        school_id,
        college_id,
        department_id,
        project_id,
    )
    if project is None:
        return render(
            request,
            "catalog/project_detail.html",
            {"project": None, "breadcrumbs": breadcrumbs},
            status=404,
        )

    tab = request.GET.get("tab", ProjectTab.OVERVIEW)
    if tab not in ProjectTab.values:
        tab = ProjectTab.OVERVIEW

    related = []
    if tab == ProjectTab.RELATED:
        related = fetch(
            request,
            services.related_projects,
            school_id,
            project_id,
            detailed=True,
            default=[],
        )

    share_url = request.build_absolute_uri(request.path)
    breadcrumbs.append(crumb(project.title, request.path))

    return render(
        request,
        "catalog/project_detail.html",
        {
            "school_id": school_id,
            "college_id": college_id,
            "department_id": department_id,
            "project": project,
            "department": department,
            "tab": tab,
            "tabs": ProjectTab.choices,
            "related": related,
            "share_url": share_url,
            "share_mailto": "mailto:?subject={}&body={}".format(
                quote(project.title), quote(share_url)
            ),
            "breadcrumbs": breadcrumbs,
        }
    )




#-------------------------
#   Project details form
#-------------------------

def apply_details_post(details, data):
    """Fold a posted details form into ``details``, honouring the cascade."""
    previous = rendered_selection(data, details.selection)
    selection = reconcile(previous, posted_selection(data))
    return wizard.ProjectDetails(
        school_id=details.school_id,
        author_ids=details.author_ids,
        title=data.get("title", "").strip(),
        abstract=data.get("abstract", ""),
        year=data.get("year", "").strip(),
        selection=selection,
    )


def details_form(request, details, bound=False, extra_departments=()):
    """Build the details form with options matching the current selection."""
    school_id = details.school_id
    selection = details.selection

    colleges = fetch(request, services.list_colleges, school_id, default=[])
    departments = []
    if selection.college_id:
        departments = fetch(
            request,
            services.list_departments,
            school_id,
            selection.college_id,
            default=[],
        )
    departments = list(extra_departments) + departments
    supervisors = []
    if selection.department_id:
        supervisors = fetch(
            request, services.list_supervisors, selection.department_id, default=[]
        )

    kwargs = {
        "colleges": colleges,
        "departments": departments,
        "supervisors": supervisors,
    }
    if bound:
        return ProjectDetailsForm(form_data(details), **kwargs)
    return ProjectDetailsForm(initial=form_data(details), **kwargs)


def project_payload(details):
    return validated_payload(ProjectPayloadSerializer, details.payload())




#-------------------------
#   Edit panel
#-------------------------

def details_from_project(project, user):
    # The project only knows its department, so the college starts blank.
    selection = Selection(
        department_id=project.department_id,
        supervisor_id=project.supervisor.id if project.supervisor else "",
    )
    return wizard.ProjectDetails(
        school_id=project.school_id or user.school_id,
        author_ids=(user.id,),
        title=project.title,
        abstract=project.abstract or "",
        year=str(project.year) if project.year else str(date.today().year),
        selection=selection,
    )


@token_required
def project_edit(request, school_id, college_id, department_id, project_id):
    detail_url = reverse(
        "catalog:project_detail",
        kwargs={
            "school_id": school_id,
            "college_id": college_id,
            "department_id": department_id,
            "project_id": project_id,
        },
    )
    project = fetch(
        request,
        services.get_project,
        school_id,
        college_id,
        department_id,
        project_id,
    )
    if project is None:
        return redirect(detail_url)

    details = details_from_project(project, request.store.user)
    extra_departments = ()

    if request.method == "POST":
        details = apply_details_post(details, request.POST)

    if not details.selection.college_id and details.selection.department_id == project.department_id:
        extra_departments = (
            Department(id=project.department_id, name=project.department_name or project.department_id),
        )

    if request.method == "POST" and request.POST.get("action") == "submit":
        form = details_form(request, details, bound=True, extra_departments=extra_departments)
        if form.is_valid() and details.is_valid:
            try:
                services.update_project(
                    request.api, school_id, project_id, project_payload(details)
                )
            except Unauthorized:
                raise
            except ValidationError as exc:
                logger.warning("Rejected update of project %s: %s", project_id, exc.detail)
                messages.error(request, wizard.MISSING_FIELDS)
            except ApiError as exc:
                logger.warning("Updating project %s failed: %s", project_id, exc)
                messages.error(request, "Failed to update project. Please try again.")
            else:
                messages.success(request, "Project updated successfully!")
                return redirect(detail_url)
        else:
            messages.error(request, wizard.MISSING_FIELDS)
    else:
        form = details_form(request, details, extra_departments=extra_departments)

    return render(
        request,
        "catalog/project_edit.html",
        {
            "project": project,
            "form": form,
            "details": details,
            "detail_url": detail_url,
        }
    )




#-------------------------
#   Submission wizard
#-------------------------

def load_wizard(request, school_id):
    data = request.session.get(WIZARD_KEY)
    if data:
        try:
            state = wizard.load(data)
        except (KeyError, TypeError, ValueError):
            logger.warning("Dropping unreadable wizard state")
        else:
            if state.details.school_id == school_id:
                return state
            # A wizard left open for another school gives up its picked file.
            discard_pending(state)
            request.session.pop(WIZARD_KEY, None)
    user = request.store.user
    return wizard.start(school_id, user.id if user else "")


def save_wizard(request, state):
    request.session[WIZARD_KEY] = wizard.dump(state)


def discard_pending(state):
    pending = wizard.pending_file(state)
    if pending is not None:
        uploads.discard(pending.stored_name)


def wizard_details(request, state):
    details = apply_details_post(state.details, request.POST)
    state = wizard.edit_details(state, details)

    if request.POST.get("action") != "submit":
        return state, None

    form = details_form(request, details, bound=True)
    if not (form.is_valid() and details.is_valid):
        return wizard.details_failed(state, wizard.MISSING_FIELDS), form

    try:
        payload = project_payload(details)
    except ValidationError as exc:
        logger.warning("Rejected project payload: %s", exc.detail)
        return wizard.details_failed(state, wizard.MISSING_FIELDS), form

    try:
        project_id = services.create_project(request.api, details.school_id, payload)
    except Unauthorized:
        raise
    except ApiError as exc:
        logger.warning("Creating project failed: %s", exc)
        messages.error(request, wizard.CREATE_FAILED)
        return wizard.details_failed(state), None

    logger.info("Created project %s, waiting for its file", project_id)
    messages.success(request, "Project created successfully!")
    return wizard.details_submitted(state, project_id), None


def wizard_select_file(request, state):
    if "file" not in request.FILES:
        return wizard.file_rejected(state, wizard.NO_FILE)

    form = ProjectFileForm(request.POST, request.FILES)
    if not form.is_valid():
        return wizard.file_rejected(state, form.errors["file"][0])

    uploaded = form.cleaned_data["file"]
    discard_pending(state)
    stored_name = uploads.stash(uploaded)
    return wizard.file_selected(
        state,
        wizard.SelectedFile(
            filename=uploaded.name,
            mimetype=uploaded.content_type,
            size=uploaded.size,
            stored_name=stored_name,
        ),
    )


def wizard_upload(request, state):
    if state.file is None:
        return wizard.upload_failed(state, wizard.NO_FILE)
    if not wizard.can_upload(state):
        return state

    selected = state.file
    try:
        path = uploads.upload(selected.stored_name, selected.filename, selected.mimetype)
    except uploads.UploadError as exc:
        logger.warning("Upload for project %s failed: %s", state.project_id, exc)
        return wizard.upload_failed(state)

    messages.success(request, "File uploaded successfully!")
    return wizard.file_uploaded(state, path)


def wizard_submit_file(request, state):
    blocker = wizard.submit_blocker(state)
    if blocker:
        return wizard.upload_failed(state, blocker)

    try:
        payload = validated_payload(FilePayloadSerializer, wizard.file_payload(state))
    except ValidationError as exc:
        logger.warning("Rejected file record for project %s: %s", state.project_id, exc.detail)
        return wizard.upload_failed(state, wizard.SUBMIT_FAILED)

    try:
        services.create_file(request.api, payload)
    except Unauthorized:
        raise
    except ApiError as exc:
        logger.warning("Attaching file to project %s failed: %s", state.project_id, exc)
        messages.error(request, f"Submission error: {exc.message}")
        return wizard.upload_failed(state, wizard.SUBMIT_FAILED)

    discard_pending(state)
    logger.info("Project %s submitted with %s", state.project_id, state.file.filename)
    messages.success(request, "Project submitted successfully!")
    return wizard.completed(state)


def wizard_close(request, state, school_id):
    if wizard.needs_close_confirmation(state) and not request.POST.get("confirm"):
        return render(
            request,
            "catalog/wizard/confirm_close.html",
            {"school_id": school_id, "message": CLOSE_CONFIRMATION},
        )

    discard_pending(state)
    save_wizard(request, wizard.reset(state))
    return redirect("catalog:college_list", school_id=school_id)


WIZARD_TEMPLATES = {
    wizard.DetailsStep: "catalog/wizard/details.html",
    wizard.FileStep: "catalog/wizard/file.html",
    wizard.Complete: "catalog/wizard/complete.html",
}


def render_wizard(request, state, school_id, form=None, status=200):
    context = {
        "school_id": school_id,
        "state": state,
        "breadcrumbs": school_crumbs(request, school_id),
    }
    if isinstance(state, wizard.DetailsStep):
        context["form"] = form or details_form(request, state.details)
    elif isinstance(state, wizard.FileStep):
        context["file_form"] = ProjectFileForm()
        context["can_upload"] = wizard.can_upload(state)
        context["can_submit"] = wizard.can_submit(state)
    return render(request, WIZARD_TEMPLATES[type(state)], context, status=status)


@token_required
def project_wizard(request, school_id):
    state = load_wizard(request, school_id)

    if request.method != "POST":
        return render_wizard(request, state, school_id)

    action = request.POST.get("action", "")

    if action == "close":
        return wizard_close(request, state, school_id)

    if action == "new":
        discard_pending(state)
        state = wizard.reset(state)
    elif isinstance(state, wizard.DetailsStep) and action in ("refresh", "submit"):
        state, form = wizard_details(request, state)
        if form is not None:
            save_wizard(request, state)
            return render_wizard(request, state, school_id, form=form)
    elif isinstance(state, wizard.FileStep) and action == "select_file":
        state = wizard_select_file(request, state)
    elif isinstance(state, wizard.FileStep) and action == "remove_file":
        discard_pending(state)
        state = wizard.file_removed(state)
    elif isinstance(state, wizard.FileStep) and action == "upload":
        state = wizard_upload(request, state)
    elif isinstance(state, wizard.FileStep) and action == "submit_file":
        state = wizard_submit_file(request, state)
    elif isinstance(state, wizard.FileStep) and action == "back":
        discard_pending(state)
        state = wizard.back(state)

    save_wizard(request, state)
    return redirect("catalog:project_wizard", school_id=school_id)
