"""
Project name matching.

Lead and expense sources spell project names inconsistently
("Model  Sanayi Merkezi" vs "model sanayi merkezi"), so names are
compared in normalized form.
"""

ALL_PROJECTS = "all"


def normalize_project_name(name: str) -> str:
    """Casefold and collapse whitespace."""
    return " ".join((name or "").split()).casefold()


def is_all_projects(project: str) -> bool:
    return normalize_project_name(project) == ALL_PROJECTS


def matches_project(record_project: str, project: str) -> bool:
    """Check whether a record belongs to the requested project ("all" matches everything)."""
    if is_all_projects(project):
        return True
    return normalize_project_name(record_project) == normalize_project_name(project)
