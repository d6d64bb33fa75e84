"""
Presence normalization for the site templates.

Every "is this field there and worth rendering" decision happens here, once.
Templates only ever test a value for truthiness: absent and blank values
both come out as None, empty sections as empty lists, and links that would
point nowhere are simply not in the list.
"""

from typing import Any, Dict, List, Optional, Tuple

from folio.export.guide import github_username
from folio.models.portfolio import PortfolioRecord
from folio.utils.dates import is_present
from folio.utils.media import decode_data_uri, extension_for, is_data_uri

MEDIA_DIR = "assets/media"


def present(value: Optional[str]) -> Optional[str]:
    if value is None:
        return None
    value = value.strip()
    return value or None


def date_range(start: str, end: str) -> Optional[str]:
    start, end = present(start), present(end)
    if end and is_present(end):
        end = "Present"
    if start and end:
        return f"{start} – {end}"
    return start or end


def initials(name: str) -> str:
    parts = [p for p in name.split() if p]
    return "".join(p[0].upper() for p in parts[:2]) or "?"


def profile_link(value: Optional[str], template: str) -> Optional[str]:
    """LeetCode / HackerRank fields hold either a full URL or a bare handle."""
    value = present(value)
    if not value:
        return None
    if value.startswith(("http://", "https://")):
        return value
    return template.format(handle=value.strip("@/"))


class MediaCollector:
    """Turns data: URIs into bundle files; plain URLs are referenced as-is."""

    def __init__(self):
        self.files: Dict[str, bytes] = {}

    def resolve(self, value: Optional[str], stem: str) -> Optional[str]:
        value = present(value)
        if not value or not is_data_uri(value):
            return value
        mime, raw = decode_data_uri(value)
        path = f"{MEDIA_DIR}/{stem}.{extension_for(mime)}"
        self.files[path] = raw
        return path


def _socials(record: PortfolioRecord) -> List[Dict[str, str]]:
    details = record.personal_details
    candidates = [
        ("github", "GitHub", present(details.github)),
        ("linkedin", "LinkedIn", present(details.linkedin)),
        ("leetcode", "LeetCode", profile_link(details.leetcode, "https://leetcode.com/u/{handle}/")),
        ("hackerrank", "HackerRank", profile_link(details.hackerrank, "https://www.hackerrank.com/profile/{handle}")),
    ]
    return [
        {"key": key, "label": label, "href": href}
        for key, label, href in candidates
        if href
    ]


def _skill_groups(record: PortfolioRecord) -> List[Dict[str, Any]]:
    groups: Dict[str, List[Dict[str, Any]]] = {}
    for skill in record.skills:
        category = present(skill.category) or "Other"
        groups.setdefault(category, []).append({"name": skill.name, "level": skill.level})
    return [{"category": category, "skills": skills} for category, skills in groups.items()]


def build_context(record: PortfolioRecord, exported: bool) -> Tuple[Dict[str, Any], Dict[str, bytes]]:
    """
    Returns (template context, media files to add to the bundle).
    Media are collected in record order so paths are stable between runs.
    """
    details = record.personal_details
    media = MediaCollector()

    person = {
        "name": details.name,
        "initials": initials(details.name),
        "title": present(details.title),
        "summary": present(details.summary),
        "email": details.email,
        "phone": present(details.phone),
        "photo": media.resolve(details.profile_picture_url, "profile"),
        "resume_url": present(details.resume_url),
    }

    education = [
        {
            "institution": present(e.institution),
            "degree": " in ".join(p for p in (present(e.degree), present(e.field_of_study)) if p) or None,
            "dates": date_range(e.start_date, e.end_date),
            "description": present(e.description),
        }
        for e in record.education
    ]

    experience = [
        {
            "company": present(w.company),
            "job_title": present(w.job_title),
            "dates": date_range(w.start_date, w.end_date),
            "responsibilities": list(w.responsibilities),
        }
        for w in record.work_experience
    ]

    projects = [
        {
            "name": p.name,
            "description": present(p.description),
            "technologies": list(p.technologies),
            "link": present(p.link),
            "image": media.resolve(p.image_url, f"project-{i + 1}"),
        }
        for i, p in enumerate(record.projects)
    ]

    achievements = [
        {"title": a.title, "description": present(a.description)}
        for a in record.achievements
    ]

    certifications = [
        {
            "name": c.name,
            "issuer": present(c.issuing_organization),
            "date": present(c.date),
            "credential_url": present(c.credential_url),
        }
        for c in record.certifications
    ]

    skill_groups = _skill_groups(record)

    sections = [
        ("about", "About", bool(person["summary"])),
        ("experience", "Experience", bool(experience)),
        ("projects", "Projects", bool(projects)),
        ("skills", "Skills", bool(skill_groups)),
        ("education", "Education", bool(education)),
        ("achievements", "Achievements", bool(achievements)),
        ("certifications", "Certifications", bool(certifications)),
        ("contact", "Contact", True),
    ]

    context = {
        "exported": exported,
        "seo": {"title": record.seo.title, "description": record.seo.description},
        "person": person,
        "socials": _socials(record),
        "nav": [{"id": sid, "label": label} for sid, label, shown in sections if shown],
        "education": education,
        "experience": experience,
        "projects": projects,
        "skill_groups": skill_groups,
        "achievements": achievements,
        "certifications": certifications,
        "github_username": github_username(record),
    }
    return context, media.files
