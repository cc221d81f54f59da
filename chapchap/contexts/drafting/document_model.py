"""
Document Model

Normalized, serializable representation of a CV draft and of a cover-letter
draft. This structure is the interface between the Drafting context (which
creates and updates drafts) and the Templating/Rendering contexts (which only
read them).

Conventions:
- Every list field defaults to an empty list, never None, so renderers never
  have to tell "missing" apart from "empty".
- Entry records carry a stable `id` used for edit/remove/reorder. Ids are
  generated when absent.
- Input is accepted with snake_case or camelCase keys (the browser client
  sends camelCase: personalInfo, workExperiences, isCurrent, ...).
"""

import uuid
from typing import Any, Dict, List, Literal, Optional, Union

from pydantic import BaseModel, ConfigDict, Field
from pydantic import ValidationError as PydanticValidationError
from pydantic.alias_generators import to_camel

from chapchap.contexts.drafting.exceptions import ValidationError


def new_entry_id() -> str:
    return uuid.uuid4().hex


class DraftModel(BaseModel):
    """Base for all draft records: camelCase aliases, unknown keys ignored."""

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        extra="ignore",
        str_strip_whitespace=True,
    )


class Entry(DraftModel):
    """An item in one of the ordered entry lists."""

    id: str = Field(default_factory=new_entry_id)


# =============================================================================
# CV records
# =============================================================================


class PersonalInfo(DraftModel):
    first_name: str = ""
    last_name: str = ""
    email: str = ""
    phone: str = ""
    professional_title: str = ""
    location: str = ""
    linkedin: str = ""
    website: str = ""
    # Local file path or data: URL
    photo_url: str = ""

    @property
    def full_name(self) -> str:
        return " ".join(part for part in (self.first_name, self.last_name) if part)


class WorkExperience(Entry):
    job_title: str = ""
    company: str = ""
    location: str = ""
    start_date: str = ""
    end_date: str = ""
    is_current: bool = False
    achievements: List[str] = Field(default_factory=list)


class Education(Entry):
    degree: str = ""
    institution: str = ""
    field_of_study: str = ""
    graduation_date: str = ""
    location: str = ""


class Skill(Entry):
    name: str = ""
    level: Literal["beginner", "intermediate", "advanced", "expert"] = "intermediate"


class Language(Entry):
    name: str = ""
    proficiency: Literal["basic", "conversational", "fluent", "native"] = "conversational"


class Reference(Entry):
    name: str = ""
    title: str = ""
    company: str = ""
    phone: str = ""
    email: str = ""


class Certification(Entry):
    name: str = ""
    issuer: str = ""
    date: str = ""


class SocialLink(Entry):
    url: str = ""
    show_in_header: bool = False


class Accomplishment(Entry):
    description: str = ""


class CVData(DraftModel):
    """Complete CV draft."""

    template_id: Optional[str] = None
    personal_info: PersonalInfo = Field(default_factory=PersonalInfo)
    summary: str = ""
    work_experiences: List[WorkExperience] = Field(default_factory=list)
    education: List[Education] = Field(default_factory=list)
    skills: List[Skill] = Field(default_factory=list)
    languages: List[Language] = Field(default_factory=list)
    references: List[Reference] = Field(default_factory=list)
    certifications: List[Certification] = Field(default_factory=list)
    social_links: List[SocialLink] = Field(default_factory=list)
    accomplishments: List[Accomplishment] = Field(default_factory=list)

    @property
    def document_type(self) -> str:
        return "cv"

    @property
    def display_name(self) -> str:
        return self.personal_info.full_name or "CV"


# Entry list field name -> record class, used by the wizard operations
CV_ENTRY_LISTS = {
    "work_experiences": WorkExperience,
    "education": Education,
    "skills": Skill,
    "languages": Language,
    "references": Reference,
    "certifications": Certification,
    "social_links": SocialLink,
    "accomplishments": Accomplishment,
}


# =============================================================================
# Letter records
# =============================================================================


class LetterSender(DraftModel):
    name: str = ""
    email: str = ""
    phone: str = ""
    city: str = ""


class LetterRecipient(DraftModel):
    name: str = ""
    company: str = ""
    city: str = ""


class LetterJob(DraftModel):
    title: str = ""
    company: str = ""
    description: str = ""
    is_remote: bool = False


class LetterSignature(DraftModel):
    mode: Literal["type", "draw"] = "type"
    font_family: str = ""
    # PNG/JPEG data: URL captured from the drawing pad (mode == "draw")
    data_url: str = ""


class LetterData(DraftModel):
    """Complete cover-letter draft."""

    template_id: Optional[str] = None
    sender: LetterSender = Field(default_factory=LetterSender)
    recipient: LetterRecipient = Field(default_factory=LetterRecipient)
    job: LetterJob = Field(default_factory=LetterJob)
    strengths: List[str] = Field(default_factory=list)
    paragraphs: List[str] = Field(default_factory=list)
    date: str = ""
    signature: LetterSignature = Field(default_factory=LetterSignature)

    @property
    def document_type(self) -> str:
        return "letter"

    @property
    def display_name(self) -> str:
        return self.sender.name or "Letter"


Document = Union[CVData, LetterData]

# Keys that only appear in letter drafts
LETTER_KEYS = {"sender", "recipient", "paragraphs", "signature", "strengths", "job"}


def detect_document_type(data: Dict[str, Any]) -> str:
    """Return "letter" or "cv" based on the keys present in raw draft data."""
    if data.get("document_type") in ("cv", "letter"):
        return data["document_type"]
    return "letter" if LETTER_KEYS & set(data) else "cv"


def document_from_dict(data: Dict[str, Any], document_type: Optional[str] = None) -> Document:
    """
    Build a CV or letter draft from raw (possibly camelCase) data.

    Args:
        data: Raw draft data, e.g. parsed from JSON
        document_type: "cv" or "letter"; detected from the keys when None

    Returns:
        CVData or LetterData instance

    Raises:
        ValidationError: If the data does not match the schema
    """
    if not isinstance(data, dict):
        raise ValidationError(f"Draft data must be a mapping, got {type(data).__name__}")

    document_type = document_type or detect_document_type(data)
    if document_type not in ("cv", "letter"):
        raise ValidationError(f"Unknown document type: {document_type}")

    model = LetterData if document_type == "letter" else CVData
    payload = {key: value for key, value in data.items() if key != "document_type"}
    try:
        return model.model_validate(payload)
    except PydanticValidationError as e:
        raise ValidationError(
            f"Draft does not match the {document_type} schema",
            schema_errors=[
                f"{'.'.join(str(part) for part in err['loc'])}: {err['msg']}" for err in e.errors()
            ],
        ) from e


def document_to_dict(document: Document) -> Dict[str, Any]:
    """Serialize a draft to plain snake_case data (inverse of document_from_dict)."""
    data = document.model_dump(mode="json")
    data["document_type"] = document.document_type
    return data
