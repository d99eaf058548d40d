"""State machine behind the two-step "submit a project" flow.

    DetailsStep --details_submitted--> FileStep --completed--> Complete
         ^                                |
         +------------- back -------------+

Any state goes back to an empty DetailsStep through ``reset``. Every
transition is a pure function returning a new state; the views persist the
state in the session with ``dump``/``load`` between requests.
"""
from dataclasses import dataclass, field, replace
from typing import Optional, Tuple, Union

from .selection import Selection, supervisor_payload

CREATE_FAILED = "Failed to create project. Please try again."
UPLOAD_FAILED = "Failed to upload file. Please try again."
MISSING_FIELDS = "Please fill in all required fields"
FILE_TOO_LARGE = "File size exceeds 20MB limit"
FILE_TYPE_NOT_ALLOWED = "Only PDF, DOC, or DOCX files are allowed"
NO_FILE = "Please select a file to upload"
NOT_UPLOADED = "Please upload the file first"
NO_PROJECT = "Missing project association"
SUBMIT_FAILED = "Failed to submit file metadata"


class TransitionError(Exception):
    """A transition was requested from a state that does not allow it."""


@dataclass(frozen=True)
class ProjectDetails:
    school_id: str
    author_ids: Tuple[str, ...]
    title: str = ""
    abstract: str = ""
    year: str = ""
    selection: Selection = field(default_factory=Selection)

    def missing_fields(self):
        missing = []
        if not self.title.strip():
            missing.append("title")
        if not self.author_ids:
            missing.append("authors")
        if not self.selection.supervisor_resolved:
            missing.append("supervisor")
        if not self.school_id:
            missing.append("school")
        if not self.selection.department_id:
            missing.append("department")
        if not self.year:
            missing.append("year")
        return missing

    @property
    def is_valid(self):
        return not self.missing_fields()

    def payload(self):
        if not self.is_valid:
            raise TransitionError(MISSING_FIELDS)
        payload = {
            "title": self.title,
            "abstract": self.abstract,
            "authorIds": list(self.author_ids),
            "departmentId": self.selection.department_id,
            "schoolId": self.school_id,
            "year": self.year,
        }
        payload.update(supervisor_payload(self.selection))
        return payload


@dataclass(frozen=True)
class SelectedFile:
    filename: str
    mimetype: str
    size: int
    stored_name: str


@dataclass(frozen=True)
class DetailsStep:
    details: ProjectDetails
    error: str = ""


@dataclass(frozen=True)
class FileStep:
    details: ProjectDetails
    project_id: str
    file: Optional[SelectedFile] = None
    path: str = ""
    error: str = ""


@dataclass(frozen=True)
class Complete:
    details: ProjectDetails
    project_id: str
    filename: str


WizardState = Union[DetailsStep, FileStep, Complete]


def start(school_id, user_id):
    author_ids = (user_id,) if user_id else ()
    return DetailsStep(details=ProjectDetails(school_id=school_id, author_ids=author_ids))


def _expect(state, *types):
    if not isinstance(state, types):
        raise TransitionError(
            f"{type(state).__name__} cannot take this transition"
        )


#-------------------------
#   Step 1: details
#-------------------------

def edit_details(state, details):
    _expect(state, DetailsStep)
    return replace(state, details=details, error="")


def details_submitted(state, project_id):
    _expect(state, DetailsStep)
    if not project_id:
        raise TransitionError(NO_PROJECT)
    return FileStep(details=state.details, project_id=project_id)


def details_failed(state, message=CREATE_FAILED):
    _expect(state, DetailsStep)
    return replace(state, error=message)


#-------------------------
#   Step 2: file
#-------------------------

def check_file(size, mimetype, max_size, allowed_types):
    """Return the reason a file cannot be accepted, or an empty string."""
    if size > max_size:
        return FILE_TOO_LARGE
    if mimetype not in allowed_types:
        return FILE_TYPE_NOT_ALLOWED
    return ""


def file_selected(state, selected):
    _expect(state, FileStep)
    return replace(state, file=selected, path="", error="")


def file_rejected(state, reason):
    _expect(state, FileStep)
    return replace(state, error=reason)


def file_removed(state):
    _expect(state, FileStep)
    return replace(state, file=None, path="", error="")


def can_upload(state):
    return isinstance(state, FileStep) and state.file is not None and not state.path


def file_uploaded(state, path):
    _expect(state, FileStep)
    if state.file is None:
        raise TransitionError(NO_FILE)
    return replace(state, path=path, error="")


def upload_failed(state, message=UPLOAD_FAILED):
    _expect(state, FileStep)
    return replace(state, error=message)


def can_submit(state):
    return (
        isinstance(state, FileStep)
        and bool(state.project_id)
        and state.file is not None
        and bool(state.path)
    )


def submit_blocker(state):
    _expect(state, FileStep)
    if not state.project_id:
        return NO_PROJECT
    if state.file is None:
        return NO_FILE
    if not state.path:
        return NOT_UPLOADED
    return ""


def file_payload(state):
    """Metadata for the file record; only available once the upload finished."""
    blocker = submit_blocker(state)
    if blocker:
        raise TransitionError(blocker)
    return {
        "filename": state.file.filename,
        "path": state.path,
        "mimetype": state.file.mimetype,
        "size": state.file.size,
        "projectId": state.project_id,
    }


def completed(state):
    if not can_submit(state):
        raise TransitionError(submit_blocker(state) or NOT_UPLOADED)
    return Complete(
        details=state.details,
        project_id=state.project_id,
        filename=state.file.filename,
    )


def back(state):
    _expect(state, FileStep)
    return DetailsStep(details=state.details)


def reset(state):
    details = state.details
    return start(details.school_id, details.author_ids[0] if details.author_ids else "")


def needs_close_confirmation(state):
    if isinstance(state, Complete):
        return False
    if state.details.title:
        return True
    return isinstance(state, FileStep) and state.file is not None


def pending_file(state):
    return state.file if isinstance(state, FileStep) else None


#-------------------------
#   Session persistence
#-------------------------

def dump_details(details):
    return {
        "school_id": details.school_id,
        "author_ids": list(details.author_ids),
        "title": details.title,
        "abstract": details.abstract,
        "year": details.year,
        "selection": details.selection.to_dict(),
    }


def load_details(data):
    return ProjectDetails(
        school_id=data["school_id"],
        author_ids=tuple(data.get("author_ids") or ()),
        title=data.get("title", ""),
        abstract=data.get("abstract", ""),
        year=data.get("year", ""),
        selection=Selection.from_dict(data.get("selection")),
    )


def dump(state):
    if isinstance(state, DetailsStep):
        return {
            "step": "details",
            "details": dump_details(state.details),
            "error": state.error,
        }
    if isinstance(state, FileStep):
        selected = state.file
        return {
            "step": "file",
            "details": dump_details(state.details),
            "project_id": state.project_id,
            "file": None if selected is None else {
                "filename": selected.filename,
                "mimetype": selected.mimetype,
                "size": selected.size,
                "stored_name": selected.stored_name,
            },
            "path": state.path,
            "error": state.error,
        }
    return {
        "step": "complete",
        "details": dump_details(state.details),
        "project_id": state.project_id,
        "filename": state.filename,
    }


def load(data):
    step = data.get("step")
    if step == "details":
        return DetailsStep(details=load_details(data["details"]), error=data.get("error", ""))
    if step == "file":
        selected = data.get("file")
        return FileStep(
            details=load_details(data["details"]),
            project_id=data["project_id"],
            file=SelectedFile(**selected) if selected else None,
            path=data.get("path", ""),
            error=data.get("error", ""),
        )
    if step == "complete":
        return Complete(
            details=load_details(data["details"]),
            project_id=data["project_id"],
            filename=data.get("filename", ""),
        )
    raise ValueError(f"Unknown wizard step: {step!r}")
