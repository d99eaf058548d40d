"""Typed views of the payloads returned by the repository's REST API.

Nothing here is persisted locally: the backend owns the data and these
dataclasses only give the dashboard attribute access and sane defaults.
"""
from dataclasses import dataclass
from datetime import datetime
from typing import Optional, Tuple

from django.db import models


class SortOrder(models.TextChoices):
    NEWEST = "newest", "Newest first"
    OLDEST = "oldest", "Oldest first"
    POPULAR = "popular", "Most viewed"
    DOWNLOADS = "downloads", "Most downloaded"


class ProjectTab(models.TextChoices):
    OVERVIEW = "overview", "Overview"
    FULLTEXT = "fulltext", "Full Text"
    RESOURCES = "resources", "Resources"
    RELATED = "related", "Related Projects"


PDF_MIMETYPE = "application/pdf"


def _project_count(data):
    return (data.get("_count") or {}).get("projects") or 0


@dataclass(frozen=True)
class School:
    id: str
    name: str

    @classmethod
    def from_api(cls, data):
        return cls(id=str(data["id"]), name=data.get("name") or "")


@dataclass(frozen=True)
class Department:
    id: str
    name: str
    projects: int = 0
    college_id: Optional[str] = None
    image: Optional[str] = None

    @classmethod
    def from_api(cls, data):
        return cls(
            id=str(data["id"]),
            name=data.get("name") or "",
            projects=_project_count(data),
            college_id=data.get("collegeId"),
            image=data.get("image"),
        )


@dataclass(frozen=True)
class College:
    id: str
    name: str
    school_id: str
    image: Optional[str] = None
    projects: int = 0

    @classmethod
    def from_api(cls, data):
        departments = data.get("departments") or []
        return cls(
            id=str(data["id"]),
            name=data.get("name") or "",
            school_id=str(data.get("schoolId") or ""),
            image=data.get("image"),
            projects=sum(_project_count(dept) for dept in departments),
        )


@dataclass(frozen=True)
class Supervisor:
    id: str
    name: str
    department_id: Optional[str] = None

    @classmethod
    def from_api(cls, data):
        return cls(
            id=str(data["id"]),
            name=data.get("name") or "",
            department_id=data.get("departmentId"),
        )


@dataclass(frozen=True)
class Author:
    id: str
    first_name: str
    last_name: str = ""
    email: str = ""

    @classmethod
    def from_api(cls, data):
        return cls(
            id=str(data.get("id") or ""),
            first_name=data.get("firstName") or "",
            last_name=data.get("lastName") or "",
            email=data.get("email") or "",
        )

    @property
    def full_name(self):
        return f"{self.first_name} {self.last_name}".strip()


@dataclass(frozen=True)
class ProjectFile:
    filename: str
    path: str
    mimetype: str
    size: int
    id: Optional[str] = None
    project_id: Optional[str] = None
    uploaded_at: Optional[str] = None

    @classmethod
    def from_api(cls, data):
        return cls(
            id=data.get("id"),
            filename=data.get("filename") or "",
            path=data.get("path") or "",
            mimetype=data.get("mimetype") or "",
            size=int(data.get("size") or 0),
            project_id=data.get("projectId"),
            uploaded_at=data.get("uploadedAt"),
        )

    @property
    def size_kb(self):
        return f"{self.size / 1024:.1f}"


def _tag_name(tag):
    if isinstance(tag, dict):
        return tag.get("name") or ""
    return str(tag)


def _parse_timestamp(value):
    if not value:
        return None
    try:
        return datetime.fromisoformat(value.replace("Z", "+00:00"))
    except (AttributeError, ValueError):
        return None


@dataclass(frozen=True)
class Project:
    id: str
    title: str
    year: int
    abstract: Optional[str] = None
    visibility: str = ""
    supervisor: Optional[Supervisor] = None
    department_id: str = ""
    department_name: str = ""
    school_id: str = ""
    school_name: str = ""
    authors: Tuple[Author, ...] = ()
    tags: Tuple[str, ...] = ()
    keywords: Tuple[str, ...] = ()
    files: Tuple[ProjectFile, ...] = ()
    updated_at: Optional[str] = None
    views: int = 0
    downloads: int = 0
    likes: int = 0
    thumbnail: Optional[str] = None

    @classmethod
    def from_api(cls, data):
        supervisor = data.get("supervisor")
        department = data.get("department") or {}
        school = data.get("school") or {}
        return cls(
            id=str(data["id"]),
            title=data.get("title") or "",
            abstract=data.get("abstract"),
            visibility=data.get("visibility") or "",
            year=int(data.get("year") or 0),
            supervisor=Supervisor.from_api(supervisor) if supervisor else None,
            department_id=str(data.get("departmentId") or department.get("id") or ""),
            department_name=department.get("name") or "",
            school_id=str(data.get("schoolId") or school.get("id") or ""),
            school_name=school.get("name") or "",
            authors=tuple(Author.from_api(a) for a in data.get("authors") or []),
            tags=tuple(_tag_name(t) for t in data.get("tags") or []),
            keywords=tuple(data.get("keywords") or []),
            files=tuple(ProjectFile.from_api(f) for f in data.get("files") or []),
            updated_at=data.get("updatedAt"),
            views=data.get("views") or 0,
            downloads=data.get("downloads") or 0,
            likes=data.get("likes") or 0,
            thumbnail=data.get("thumbnail"),
        )

    @property
    def author_names(self):
        return ", ".join(a.full_name for a in self.authors) or "Unknown"

    @property
    def supervisor_name(self):
        return self.supervisor.name if self.supervisor else ""

    @property
    def main_pdf(self):
        return next((f for f in self.files if f.mimetype == PDF_MIMETYPE), None)

    @property
    def updated_display(self):
        parsed = _parse_timestamp(self.updated_at)
        if parsed is None:
            return "Date unavailable"
        return f"{parsed:%B} {parsed.day}, {parsed.year}"


@dataclass(frozen=True)
class RelatedProject:
    id: str
    title: str
    author: str = ""
    department_id: Optional[str] = None
    college_id: Optional[str] = None

    @classmethod
    def from_api(cls, data):
        authors = [Author.from_api(a).full_name for a in data.get("authors") or []]
        department = data.get("department") or {}
        return cls(
            id=str(data["id"]),
            title=data.get("title") or "",
            author=data.get("author") or ", ".join(authors),
            department_id=data.get("departmentId") or department.get("id"),
            college_id=data.get("collegeId") or department.get("collegeId"),
        )
