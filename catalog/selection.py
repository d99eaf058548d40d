"""College → department → supervisor selection shared by the create and edit forms.

Each choice invalidates the ones below it, so a department or supervisor from
a previously chosen college can never reach the backend.
"""
from dataclasses import dataclass, replace


@dataclass(frozen=True)
class Selection:
    college_id: str = ""
    department_id: str = ""
    supervisor_id: str = ""
    create_new: bool = False
    new_supervisor_name: str = ""

    @classmethod
    def from_dict(cls, data):
        data = data or {}
        return cls(
            college_id=data.get("college_id", ""),
            department_id=data.get("department_id", ""),
            supervisor_id=data.get("supervisor_id", ""),
            create_new=bool(data.get("create_new", False)),
            new_supervisor_name=data.get("new_supervisor_name", ""),
        )

    def to_dict(self):
        return {
            "college_id": self.college_id,
            "department_id": self.department_id,
            "supervisor_id": self.supervisor_id,
            "create_new": self.create_new,
            "new_supervisor_name": self.new_supervisor_name,
        }

    @property
    def supervisor_resolved(self):
        if self.create_new:
            return bool(self.new_supervisor_name.strip())
        return bool(self.supervisor_id)


def clear_supervisor(selection):
    return replace(selection, supervisor_id="", new_supervisor_name="")


def choose_college(selection, college_id):
    if college_id == selection.college_id:
        return selection
    return clear_supervisor(
        replace(selection, college_id=college_id, department_id="")
    )


def choose_department(selection, department_id):
    if department_id == selection.department_id:
        return selection
    return clear_supervisor(replace(selection, department_id=department_id))


def choose_supervisor(selection, supervisor_id):
    return replace(selection, supervisor_id=supervisor_id, create_new=False, new_supervisor_name="")


def set_create_new(selection, create_new):
    if create_new == selection.create_new:
        return selection
    return clear_supervisor(replace(selection, create_new=create_new))


def name_supervisor(selection, name):
    return replace(selection, new_supervisor_name=name, supervisor_id="")


def reconcile(previous, posted):
    """Apply a submitted selection on top of the one the form was rendered with.

    Changes are applied top-down: when the college moved, the posted
    department and supervisor belong to the old college and are dropped, and
    likewise for a department change.
    """
    selection = choose_college(previous, posted.college_id)
    if selection.college_id != previous.college_id:
        return selection

    selection = choose_department(selection, posted.department_id)
    if selection.department_id != previous.department_id:
        return selection

    selection = set_create_new(selection, posted.create_new)
    if selection.create_new != previous.create_new:
        return selection

    if selection.create_new:
        return name_supervisor(selection, posted.new_supervisor_name)
    return choose_supervisor(selection, posted.supervisor_id)


def supervisor_payload(selection):
    """Exactly one of ``supervisorId`` / ``newSupervisor``, or None if unresolved."""
    if selection.create_new:
        name = selection.new_supervisor_name.strip()
        if name:
            return {"newSupervisor": {"name": name}}
        return None
    if selection.supervisor_id:
        return {"supervisorId": selection.supervisor_id}
    return None
