"""
Portfolio record schema.

One PortfolioRecord aggregates everything the site shows. Keys on the wire
(AI intake output, record files, the bundle's data/portfolio.json) are
camelCase; attributes are snake_case. Records are frozen snapshots: an edit
always produces a new record that goes through the validator again.
"""

import re
from typing import Annotated, Any, List, Optional
from urllib.parse import urlparse

from pydantic import (
    AfterValidator,
    BaseModel,
    BeforeValidator,
    ConfigDict,
    EmailStr,
    Field,
    field_validator,
)
from pydantic.alias_generators import to_camel

from folio.utils.media import decode_data_uri, is_data_uri

# "github.com/ada" -> needs a scheme before it is a usable link
SCHEMELESS_HOST = re.compile(r"^[\w-]+(\.[\w-]+)+(/.*)?$")

# -----------------------------------------------------------------------------
# FIELD NORMALIZERS
# -----------------------------------------------------------------------------

def _blank_to_none(value: Any) -> Any:
    if isinstance(value, str) and not value.strip():
        return None
    return value


def _none_to_empty(value: Any) -> Any:
    return "" if value is None else value


def _split_csv(value: Any) -> Any:
    """AI output sometimes flattens lists into 'a, b, c'."""
    if value is None:
        return []
    if isinstance(value, str):
        return value.split(",")
    return value


def _drop_blank(items: List[str]) -> List[str]:
    return [item for item in items if item]


def _check_url(value: Optional[str]) -> Optional[str]:
    if value is None:
        return None
    if SCHEMELESS_HOST.match(value):
        value = f"https://{value}"
    parsed = urlparse(value)
    if parsed.scheme not in ("http", "https") or not parsed.netloc:
        raise ValueError("must be an http(s) URL")
    if any(ch.isspace() for ch in value):
        raise ValueError("URL must not contain whitespace")
    return value


def _check_image_url(value: Optional[str]) -> Optional[str]:
    if is_data_uri(value):
        decode_data_uri(value)
        return value
    return _check_url(value)


def _check_link_text(value: str) -> str:
    # linkedin / github are required keys but may legitimately be left blank
    return _check_url(value) if value else value


Text = Annotated[str, BeforeValidator(_none_to_empty)]
RequiredText = Annotated[str, Field(min_length=1)]
OptionalText = Annotated[Optional[str], BeforeValidator(_blank_to_none)]
OptionalUrl = Annotated[Optional[str], BeforeValidator(_blank_to_none), AfterValidator(_check_url)]
OptionalImage = Annotated[Optional[str], BeforeValidator(_blank_to_none), AfterValidator(_check_image_url)]
LinkText = Annotated[str, BeforeValidator(_none_to_empty), AfterValidator(_check_link_text)]
StringList = Annotated[List[str], BeforeValidator(_split_csv), AfterValidator(_drop_blank)]

# -----------------------------------------------------------------------------
# MODELS
# -----------------------------------------------------------------------------

class FolioModel(BaseModel):
    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        frozen=True,
        extra="ignore",
        str_strip_whitespace=True,
        coerce_numbers_to_str=True,
    )


class PersonalDetails(FolioModel):
    name: RequiredText
    title: Text = ""
    email: EmailStr
    phone: Text = ""
    linkedin: LinkText = ""
    github: LinkText = ""
    summary: Text = ""
    leetcode: OptionalText = None
    hackerrank: OptionalText = None
    resume_url: OptionalUrl = None
    profile_picture_url: OptionalImage = None


class Education(FolioModel):
    institution: Text = ""
    degree: Text = ""
    field_of_study: Text = ""
    start_date: Text = ""
    end_date: Text = ""
    description: Text = ""


class WorkExperience(FolioModel):
    company: Text = ""
    job_title: Text = ""
    start_date: Text = ""
    end_date: Text = ""
    responsibilities: StringList = Field(default_factory=list)


class Skill(FolioModel):
    category: Text = ""
    name: RequiredText
    level: int = Field(ge=0, le=100)  # proficiency, percent


class Project(FolioModel):
    name: RequiredText
    description: Text = ""
    technologies: StringList = Field(default_factory=list)
    link: OptionalUrl = None
    image_url: OptionalImage = None


class Achievement(FolioModel):
    title: RequiredText
    description: Text = ""


class Certification(FolioModel):
    name: RequiredText
    issuing_organization: Text = ""
    date: Text = ""
    credential_url: OptionalUrl = None


class SEO(FolioModel):
    title: RequiredText
    description: RequiredText


class ContactMessage(FolioModel):
    name: RequiredText
    email: EmailStr
    message: RequiredText
    date: RequiredText


class PortfolioRecord(FolioModel):
    personal_details: PersonalDetails
    education: List[Education] = Field(default_factory=list)
    work_experience: List[WorkExperience] = Field(default_factory=list)
    skills: List[Skill] = Field(default_factory=list)
    projects: List[Project] = Field(default_factory=list)
    achievements: List[Achievement] = Field(default_factory=list)
    certifications: List[Certification] = Field(default_factory=list)
    seo: SEO

    @field_validator(
        "education", "work_experience", "skills", "projects",
        "achievements", "certifications",
        mode="before",
    )
    @classmethod
    def null_sections_are_empty(cls, value):
        return [] if value is None else value

    def to_wire(self) -> dict:
        """camelCase, JSON-safe dict with absent optionals left out."""
        return self.model_dump(by_alias=True, exclude_none=True, mode="json")
