import pytest

from catalog import wizard
from catalog.selection import Selection

MB = 1024 * 1024
ALLOWED = (
    "application/pdf",
    "application/msword",
    "application/vnd.openxmlformats-officedocument.wordprocessingml.document",
)
PDF = wizard.SelectedFile(
    filename="thesis.pdf",
    mimetype="application/pdf",
    size=1024,
    stored_name="pending-uploads/abc/thesis.pdf",
)


def details(**selection):
    return wizard.ProjectDetails(
        school_id="S1",
        author_ids=("u1",),
        title="Thesis A",
        abstract="",
        year="2024",
        selection=Selection(college_id="C1", department_id="D1", **selection),
    )


def file_step():
    state = wizard.start("S1", "u1")
    state = wizard.edit_details(state, details(supervisor_id="SUP1"))
    return wizard.details_submitted(state, "P1")


def test_start_defaults_authors_to_current_user():
    state = wizard.start("S1", "u1")
    assert isinstance(state, wizard.DetailsStep)
    assert state.details.author_ids == ("u1",)
    assert state.details.school_id == "S1"


def test_payload_with_existing_supervisor():
    assert details(supervisor_id="SUP1").payload() == {
        "title": "Thesis A",
        "abstract": "",
        "authorIds": ["u1"],
        "departmentId": "D1",
        "schoolId": "S1",
        "year": "2024",
        "supervisorId": "SUP1",
    }


def test_payload_with_new_supervisor():
    payload = details(create_new=True, new_supervisor_name="Dr. X").payload()
    assert payload["newSupervisor"] == {"name": "Dr. X"}
    assert "supervisorId" not in payload


def test_payload_requires_supervisor():
    incomplete = details()
    assert incomplete.missing_fields() == ["supervisor"]
    with pytest.raises(wizard.TransitionError):
        incomplete.payload()


def test_details_submitted_needs_project_id():
    state = wizard.edit_details(wizard.start("S1", "u1"), details(supervisor_id="SUP1"))
    with pytest.raises(wizard.TransitionError):
        wizard.details_submitted(state, "")


def test_details_failed_keeps_input():
    state = wizard.edit_details(wizard.start("S1", "u1"), details(supervisor_id="SUP1"))
    failed = wizard.details_failed(state)
    assert failed.error == wizard.CREATE_FAILED
    assert failed.details.title == "Thesis A"


@pytest.mark.parametrize(
    "size, mimetype, reason",
    [
        (25 * MB, "application/pdf", wizard.FILE_TOO_LARGE),
        (1 * MB, "image/png", wizard.FILE_TYPE_NOT_ALLOWED),
        (20 * MB, "application/pdf", ""),
        (1 * MB, "application/msword", ""),
    ],
)
def test_check_file(size, mimetype, reason):
    assert wizard.check_file(size, mimetype, 20 * MB, ALLOWED) == reason


def test_file_record_needs_upload_first():
    state = wizard.file_selected(file_step(), PDF)
    assert wizard.can_upload(state)
    assert not wizard.can_submit(state)
    assert wizard.submit_blocker(state) == wizard.NOT_UPLOADED
    with pytest.raises(wizard.TransitionError):
        wizard.file_payload(state)
    with pytest.raises(wizard.TransitionError):
        wizard.completed(state)


def test_uploaded_file_payload():
    state = wizard.file_uploaded(
        wizard.file_selected(file_step(), PDF), "https://media.example.com/thesis.pdf"
    )
    assert not wizard.can_upload(state)
    assert wizard.can_submit(state)
    assert wizard.file_payload(state) == {
        "filename": "thesis.pdf",
        "path": "https://media.example.com/thesis.pdf",
        "mimetype": "application/pdf",
        "size": 1024,
        "projectId": "P1",
    }

    done = wizard.completed(state)
    assert isinstance(done, wizard.Complete)
    assert done.filename == "thesis.pdf"


def test_selecting_another_file_forgets_previous_upload():
    state = wizard.file_uploaded(wizard.file_selected(file_step(), PDF), "https://x/1.pdf")
    other = wizard.SelectedFile("b.pdf", "application/pdf", 10, "pending-uploads/b.pdf")
    assert wizard.file_selected(state, other).path == ""


def test_failed_upload_keeps_file_and_retries():
    state = wizard.upload_failed(wizard.file_selected(file_step(), PDF))
    assert state.error == wizard.UPLOAD_FAILED
    assert state.file == PDF
    assert wizard.can_upload(state)


def test_back_returns_to_details_with_input():
    state = wizard.back(wizard.file_selected(file_step(), PDF))
    assert isinstance(state, wizard.DetailsStep)
    assert state.details.title == "Thesis A"
    assert wizard.pending_file(state) is None


def test_reset_gives_empty_form_for_same_user():
    state = wizard.reset(wizard.file_selected(file_step(), PDF))
    assert state == wizard.start("S1", "u1")


def test_close_confirmation():
    assert not wizard.needs_close_confirmation(wizard.start("S1", "u1"))
    titled = wizard.edit_details(wizard.start("S1", "u1"), details())
    assert wizard.needs_close_confirmation(titled)
    assert wizard.needs_close_confirmation(wizard.file_selected(file_step(), PDF))

    uploaded = wizard.file_uploaded(wizard.file_selected(file_step(), PDF), "https://x/1.pdf")
    assert not wizard.needs_close_confirmation(wizard.completed(uploaded))


def test_file_transitions_rejected_on_details_step():
    with pytest.raises(wizard.TransitionError):
        wizard.file_selected(wizard.start("S1", "u1"), PDF)


def test_session_round_trip_of_file_step():
    state = wizard.file_selected(file_step(), PDF)
    assert wizard.load(wizard.dump(state)) == state


def test_load_rejects_unknown_step():
    with pytest.raises(ValueError):
        wizard.load({"step": "bogus"})
