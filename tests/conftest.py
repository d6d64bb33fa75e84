import base64

import pytest

from folio.logic.validator import validate

# 1x1 transparent PNG
PNG_BYTES = base64.b64decode(
    "iVBORw0KGgoAAAANSUhEUgAAAAEAAAABCAQAAAC1HAwCAAAAC0lEQVR42mNkYAAAAAYAAjCB0C8AAAAASUVORK5CYII="
)
PNG_DATA_URI = "data:image/png;base64," + base64.b64encode(PNG_BYTES).decode("ascii")


@pytest.fixture
def minimal_candidate():
    return {
        "personalDetails": {
            "name": "Ada",
            "email": "ada@x.com",
            "github": "https://github.com/ada",
        },
        "education": [],
        "workExperience": [],
        "skills": [],
        "projects": [],
        "achievements": [],
        "certifications": [],
        "seo": {"title": "Ada | Portfolio", "description": "Personal site of Ada."},
    }


@pytest.fixture
def full_candidate():
    return {
        "personalDetails": {
            "name": "Ada Lovelace",
            "title": "Programmer",
            "email": "ada@example.com",
            "phone": "+44 20 7946 0000",
            "linkedin": "https://www.linkedin.com/in/ada-lovelace",
            "github": "https://github.com/ada",
            "summary": "I write programs for engines that do not exist yet.",
            "leetcode": "ada",
            "hackerrank": "https://www.hackerrank.com/profile/ada",
            "resumeUrl": "https://example.com/ada-cv.pdf",
            "profilePictureUrl": "https://example.com/ada.jpg",
        },
        "education": [{
            "institution": "University of London",
            "degree": "BSc",
            "fieldOfStudy": "Mathematics",
            "startDate": "2015-09",
            "endDate": "2018-06",
            "description": "First class honours.",
        }],
        "workExperience": [{
            "company": "Analytical Engines Ltd",
            "jobTitle": "Programmer",
            "startDate": "Oct 2018",
            "endDate": "Present",
            "responsibilities": ["Wrote Note G", "Translated the memoir"],
        }],
        "skills": [
            {"category": "Mathematics", "name": "Calculus", "level": 90},
            {"category": "Programming", "name": "Engine tables", "level": 95},
            {"category": "Mathematics", "name": "Probability", "level": 70},
        ],
        "projects": [{
            "name": "Note G",
            "description": "Bernoulli numbers on the Analytical Engine.",
            "technologies": ["Punched cards"],
            "link": "https://en.wikipedia.org/wiki/Note_G",
            "imageUrl": "https://example.com/note-g.png",
        }],
        "achievements": [{"title": "First program", "description": "Published 1843."}],
        "certifications": [{
            "name": "Royal Society Fellow",
            "issuingOrganization": "Royal Society",
            "date": "1843",
            "credentialUrl": "https://royalsociety.org/ada",
        }],
        "seo": {
            "title": "Ada Lovelace - Programmer",
            "description": "Portfolio of the first computer programmer.",
        },
    }


@pytest.fixture
def record(full_candidate):
    result = validate(full_candidate)
    assert result.ok, result.errors
    return result.record


@pytest.fixture
def minimal_record(minimal_candidate):
    result = validate(minimal_candidate)
    assert result.ok, result.errors
    return result.record
