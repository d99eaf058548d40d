from .models import SortOrder

DEPARTMENT_TAGS = (
    "Machine Learning",
    "Data Science",
    "IoT",
    "Robotics",
    "Sustainability",
    "Software Engineering",
    "Artificial Intelligence",
    "Virtual Reality",
    "Networks",
    "Cybersecurity",
)


def hashtag(tag):
    return "#" + "".join(tag.split())


def search_by_name(items, query):
    query = (query or "").strip().lower()
    if not query:
        return list(items)
    return [item for item in items if query in item.name.lower()]


def selected_tags(values):
    """Known tags picked in the department filter, in vocabulary order."""
    picked = set(values)
    return [tag for tag in DEPARTMENT_TAGS if tag in picked]


def project_matches(project, query):
    query = query.lower()
    fields = [
        project.title,
        " ".join(a.full_name for a in project.authors),
        project.abstract or "",
        project.supervisor_name,
    ]
    fields.extend(project.tags)
    return any(query in value.lower() for value in fields)


def filter_projects(projects, query="", year="all", sort=SortOrder.NEWEST):
    result = list(projects)

    query = (query or "").strip()
    if query:
        result = [p for p in result if project_matches(p, query)]

    if year and year != "all":
        result = [p for p in result if str(p.year) == str(year)]

    if sort == SortOrder.NEWEST:
        result.sort(key=lambda p: p.year, reverse=True)
    elif sort == SortOrder.OLDEST:
        result.sort(key=lambda p: p.year)
    elif sort == SortOrder.POPULAR:
        result.sort(key=lambda p: p.views or 0, reverse=True)
    elif sort == SortOrder.DOWNLOADS:
        result.sort(key=lambda p: p.downloads or 0, reverse=True)

    return result


def project_years(projects):
    return sorted({p.year for p in projects}, reverse=True)
