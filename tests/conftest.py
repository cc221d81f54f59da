"""Shared drafts and output isolation for the test suite."""

import pytest

from chapchap.contexts.drafting.document_model import document_from_dict

# Smallest 1x1 PNG, used as photo and drawn signature
PIXEL_PNG = (
    "data:image/png;base64,"
    "iVBORw0KGgoAAAANSUhEUgAAAAEAAAABCAYAAAAfFcSJAAAADUlEQVR42mP8z8BQDwAEhQGAhKmMIQAAAABJRU5ErkJggg=="
)


def full_cv_data():
    """CV draft with every list filled, in browser (camelCase) form."""
    return {
        "templateId": "oliver",
        "personalInfo": {
            "firstName": "Amina",
            "lastName": "Mushi",
            "email": "amina.mushi@example.com",
            "phone": "+255 712 000 111",
            "professionalTitle": "Senior Accountant",
            "location": "Dar es Salaam, Tanzania",
            "photoUrl": PIXEL_PNG,
        },
        "summary": (
            "Chartered accountant with eight years of experience in audit, tax and "
            "financial reporting for manufacturing and logistics companies.\n\n"
            "Comfortable leading small teams and presenting results to boards."
        ),
        "workExperiences": [
            {
                "id": "job-1",
                "jobTitle": "Senior Accountant",
                "company": "Kilimanjaro Logistics",
                "location": "Dar es Salaam",
                "startDate": "2020-01",
                "isCurrent": True,
                "achievements": [
                    "Closed the monthly books in four days instead of ten",
                    "Led the migration of the general ledger to a cloud system",
                    "Trained six junior accountants on IFRS 16 lease accounting",
                ],
            },
            {
                "id": "job-2",
                "jobTitle": "Audit Associate",
                "company": "Msasani Partners",
                "startDate": "2016-07",
                "endDate": "2019-12",
                "achievements": ["Audited twelve mid-sized manufacturers each year"],
            },
        ],
        "education": [
            {
                "id": "edu-1",
                "degree": "BCom",
                "fieldOfStudy": "Accounting",
                "institution": "University of Dar es Salaam",
                "graduationDate": "2016",
            }
        ],
        "skills": [
            {"id": "s-1", "name": "IFRS reporting", "level": "expert"},
            {"id": "s-2", "name": "Tax planning", "level": "advanced"},
            {"id": "s-3", "name": "Excel modelling", "level": "advanced"},
        ],
        "languages": [
            {"id": "l-1", "name": "Swahili", "proficiency": "native"},
            {"id": "l-2", "name": "English", "proficiency": "fluent"},
        ],
        "references": [
            {
                "id": "r-1",
                "name": "Joseph Kimaro",
                "title": "Finance Director",
                "company": "Kilimanjaro Logistics",
                "phone": "+255 713 222 333",
                "email": "j.kimaro@example.com",
            }
        ],
        "certifications": [{"id": "c-1", "name": "CPA (T)", "issuer": "NBAA", "date": "2018"}],
        "socialLinks": [{"id": "sl-1", "url": "linkedin.com/in/aminamushi", "showInHeader": True}],
        "accomplishments": [{"id": "a-1", "description": "Best audit team award, 2019"}],
    }


def letter_data():
    return {
        "templateId": "professional",
        "sender": {"name": "Amina Mushi", "email": "amina.mushi@example.com", "city": "Arusha"},
        "recipient": {"name": "Grace Mollel", "company": "Serengeti Foods", "city": "Arusha"},
        "job": {"title": "Finance Manager", "company": "Serengeti Foods"},
        "strengths": ["Leadership", "Attention to detail", "Communication"],
        "date": "November 14, 2025",
    }


@pytest.fixture
def minimal_cv():
    """Only the mandatory identity fields."""
    return document_from_dict(
        {"personalInfo": {"firstName": "Amina", "lastName": "Mushi", "email": "amina@example.com"}},
        document_type="cv",
    )


@pytest.fixture
def full_cv():
    return document_from_dict(full_cv_data(), document_type="cv")


@pytest.fixture
def letter():
    return document_from_dict(letter_data(), document_type="letter")


@pytest.fixture
def isolated_outputs(tmp_path, monkeypatch):
    """Send logs, results and generation events to tmp_path."""
    from chapchap.contexts.rendering import renderer
    from chapchap.utils import event_logging

    monkeypatch.setattr(renderer, "LOGS_PATH", tmp_path / "logs")
    monkeypatch.setattr(renderer, "RESULTS_PATH", tmp_path / "results")
    monkeypatch.setattr(event_logging, "GENERATION_EVENTS_FILE", tmp_path / "logs" / "events.log")
    return tmp_path


@pytest.fixture
def pixel_png():
    return PIXEL_PNG
