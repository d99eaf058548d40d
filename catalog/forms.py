from django import forms
from django.conf import settings
from django.core.validators import RegexValidator

from .selection import Selection
from .wizard import check_file

SUPERVISOR_EXISTING = "existing"
SUPERVISOR_NEW = "new"


def posted_selection(data):
    """The college/department/supervisor choice exactly as the browser sent it."""
    return Selection(
        college_id=data.get("college", ""),
        department_id=data.get("department", ""),
        supervisor_id=data.get("supervisor", ""),
        create_new=data.get("supervisor_mode") == SUPERVISOR_NEW,
        new_supervisor_name=data.get("new_supervisor", ""),
    )


def rendered_selection(data, fallback):
    """The selection the submitted page was showing options for.

    Read from the hidden ``prev_*`` fields, which the page keeps in step with
    the options it displays; ``fallback`` covers posts without them.
    """
    fallback_mode = SUPERVISOR_NEW if fallback.create_new else SUPERVISOR_EXISTING
    return Selection(
        college_id=data.get("prev_college", fallback.college_id),
        department_id=data.get("prev_department", fallback.department_id),
        supervisor_id=fallback.supervisor_id,
        create_new=data.get("prev_mode", fallback_mode) == SUPERVISOR_NEW,
        new_supervisor_name=fallback.new_supervisor_name,
    )


def form_data(details):
    selection = details.selection
    mode = SUPERVISOR_NEW if selection.create_new else SUPERVISOR_EXISTING
    return {
        "prev_college": selection.college_id,
        "prev_department": selection.department_id,
        "prev_mode": mode,
        "title": details.title,
        "abstract": details.abstract,
        "year": details.year,
        "college": selection.college_id,
        "department": selection.department_id,
        "supervisor_mode": mode,
        "supervisor": selection.supervisor_id,
        "new_supervisor": selection.new_supervisor_name,
    }


def _choices(placeholder, items):
    return [("", placeholder)] + [(item.id, item.name) for item in items]


class ProjectDetailsForm(forms.Form):
    title = forms.CharField(max_length=255)
    abstract = forms.CharField(widget=forms.Textarea, required=False)
    college = forms.ChoiceField(required=False)
    department = forms.ChoiceField()
    supervisor_mode = forms.ChoiceField(
        choices=[
            (SUPERVISOR_EXISTING, "Select an existing supervisor"),
            (SUPERVISOR_NEW, "Create a new supervisor"),
        ],
        initial=SUPERVISOR_EXISTING,
    )
    supervisor = forms.ChoiceField(required=False)
    new_supervisor = forms.CharField(max_length=255, required=False)
    year = forms.CharField(
        max_length=4,
        validators=[RegexValidator(r"^\d{4}$", "Enter a four-digit year")],
    )
    prev_college = forms.CharField(widget=forms.HiddenInput, required=False)
    prev_department = forms.CharField(widget=forms.HiddenInput, required=False)
    prev_mode = forms.CharField(widget=forms.HiddenInput, required=False)

    def __init__(self, *args, colleges=(), departments=(), supervisors=(), **kwargs):
        super().__init__(*args, **kwargs)
        self.fields["college"].choices = _choices("Select a college", colleges)
        self.fields["department"].choices = _choices("Select a department", departments)
        self.fields["supervisor"].choices = _choices("Select a supervisor", supervisors)

    def clean(self):
        cleaned_data = super().clean()
        if cleaned_data.get("supervisor_mode") == SUPERVISOR_NEW:
            if not (cleaned_data.get("new_supervisor") or "").strip():
                self.add_error("new_supervisor", "Enter the new supervisor's name")
        elif not cleaned_data.get("supervisor"):
            self.add_error("supervisor", "Select a supervisor")
        return cleaned_data


class ProjectFileForm(forms.Form):
    file = forms.FileField()

    def clean_file(self):
        uploaded = self.cleaned_data["file"]
        reason = check_file(
            uploaded.size,
            uploaded.content_type,
            settings.MAX_UPLOAD_SIZE,
            settings.ALLOWED_UPLOAD_TYPES,
        )
        if reason:
            raise forms.ValidationError(reason)
        return uploaded
