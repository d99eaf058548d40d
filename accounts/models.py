from dataclasses import dataclass
from typing import Optional

from django.db import models


class UserRole(models.TextChoices):
    STUDENT = "STUDENT", "Student"
    FACULTY = "FACULTY", "Faculty"


@dataclass(frozen=True)
class User:
    id: str
    first_name: str
    email: str
    role: str
    school_id: str
    last_name: str = ""
    department_id: Optional[str] = None

    @classmethod
    def from_api(cls, data):
        return cls(
            id=str(data.get("id") or ""),
            first_name=data.get("firstName") or "",
            last_name=data.get("lastName") or "",
            email=data.get("email") or "",
            role=data.get("role") or UserRole.STUDENT,
            school_id=str(data.get("schoolId") or ""),
            department_id=data.get("departmentId"),
        )

    def to_api(self):
        return {
            "id": self.id,
            "firstName": self.first_name,
            "lastName": self.last_name,
            "email": self.email,
            "role": self.role,
            "schoolId": self.school_id,
            "departmentId": self.department_id,
        }

    @property
    def full_name(self):
        return f"{self.first_name} {self.last_name}".strip()

    def __str__(self):
        return self.email


@dataclass(frozen=True)
class AuthResult:
    token: str
    user: User
