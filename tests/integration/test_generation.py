"""
Integration tests for document generation - saved PDFs, event log and batches.
"""

import json

import pytest

from chapchap.contexts.drafting.document_model import CVData
from chapchap.contexts.rendering import USER_ERROR_MESSAGE, generate_batch, generate_document
from chapchap.contexts.rendering.exceptions import RenderBackendError
from chapchap.contexts.rendering.renderer import document_name_for, prepare_document
from chapchap.utils import event_logging
from chapchap.utils.event_logging import get_recent_events
from chapchap.utils.pdf_processing import page_count


def _events():
    return get_recent_events(n=100, events_file=event_logging.GENERATION_EVENTS_FILE)


@pytest.mark.integration
def test_generate_document_success(full_cv, isolated_outputs):
    """Test that a successful run writes the PDF and logs start/completion."""
    result = generate_document(full_cv, "oliver", output_dir=isolated_outputs / "out")

    assert result.success, result.error
    assert result.pdf_path == isolated_outputs / "out" / "Amina_Mushi_cv_oliver.pdf"
    assert result.pdf_path.read_bytes().startswith(b"%PDF")
    assert page_count(result.pdf_path) == result.page_count
    assert result.user_message is None
    assert (result.log_dir / "render.log").exists()

    events = _events()
    assert [e["event_type"] for e in events] == ["generation_started", "generation_completed"]
    assert events[1]["page_count"] == result.page_count
    assert events[1]["source"] == "rendering"


@pytest.mark.integration
def test_generate_document_default_output_dir(full_cv, isolated_outputs):
    """Test that PDFs go to RESULTS_PATH/<date>/ by default."""
    result = generate_document(full_cv)

    assert result.success
    assert result.pdf_path.parent.parent == isolated_outputs / "results"
    # No temporary files are left next to the PDF
    assert list(result.pdf_path.parent.iterdir()) == [result.pdf_path]


@pytest.mark.integration
def test_generate_document_failure_leaves_no_file(isolated_outputs):
    """Test that a failed run writes nothing and returns the user-facing message."""
    output_dir = isolated_outputs / "out"
    result = generate_document(CVData(), "oliver", output_dir=output_dir)

    assert not result.success
    assert result.pdf_path is None
    assert result.error_kind == "validation_error"
    assert result.user_message == USER_ERROR_MESSAGE
    assert not output_dir.exists() or list(output_dir.iterdir()) == []

    events = _events()
    assert events[-1]["event_type"] == "generation_failed"
    assert events[-1]["error_kind"] == "validation_error"


@pytest.mark.integration
def test_generate_unknown_template(full_cv, isolated_outputs):
    """Test that an unknown template is reported with its internal kind."""
    result = generate_document(full_cv, "does-not-exist", output_dir=isolated_outputs / "out")

    assert not result.success
    assert result.error_kind == "unknown_template"
    assert result.user_message == USER_ERROR_MESSAGE
    assert "does-not-exist" in result.document_name


@pytest.mark.integration
def test_backend_failure_is_atomic(full_cv, isolated_outputs, monkeypatch):
    """Test that a backend error mid-draw leaves no partial PDF behind."""
    from chapchap.contexts.rendering.backends.primitive import PrimitiveBackend

    def broken_render(self, layout):
        raise RenderBackendError("Disk full while drawing", backend=self.name)

    monkeypatch.setattr(PrimitiveBackend, "render", broken_render)
    output_dir = isolated_outputs / "out"
    result = generate_document(full_cv, "oliver", "primitive", output_dir=output_dir)

    assert not result.success
    assert result.error_kind == "render_backend_error"
    assert not output_dir.exists() or list(output_dir.iterdir()) == []


@pytest.mark.integration
def test_render_timeout(full_cv, isolated_outputs, monkeypatch):
    """Test that exceeding the time limit is reported as a timeout."""
    import threading

    from chapchap.contexts.rendering.backends.primitive import PrimitiveBackend

    release = threading.Event()

    def slow_render(self, layout):
        release.wait(5)
        raise RenderBackendError("Released", backend=self.name)

    monkeypatch.setattr(PrimitiveBackend, "render", slow_render)
    try:
        result = generate_document(
            full_cv, "oliver", "primitive", output_dir=isolated_outputs / "out", timeout_s=0.2
        )
    finally:
        release.set()

    assert not result.success
    assert result.error_kind == "render_timeout"


@pytest.mark.integration
def test_generate_letter_fills_body_and_date(letter, isolated_outputs):
    """Test that a letter without paragraphs gets the default body."""
    undated = letter.model_copy(update={"date": ""})
    prepared = prepare_document(undated)

    assert len(prepared.paragraphs) == 4
    assert prepared.date

    result = generate_document(undated, "contempo", output_dir=isolated_outputs / "out")
    assert result.success, result.error
    assert result.pdf_path.name == "Amina_Mushi_letter_contempo.pdf"


@pytest.mark.integration
def test_generate_batch_keeps_order(full_cv, minimal_cv, letter, isolated_outputs):
    """Test that batch results come back in input order with unique names."""
    jobs = [
        (full_cv, "oliver"),
        (minimal_cv, "charles"),
        (CVData(), "oliver"),
        (letter, "pacific"),
        (full_cv, "oliver"),
    ]
    results = generate_batch(jobs, "primitive", output_dir=isolated_outputs / "out", max_workers=3)

    assert [r.success for r in results] == [True, True, False, True, True]
    assert results[0].document_name == "Amina_Mushi_cv_oliver"
    assert results[4].document_name == "Amina_Mushi_cv_oliver_2"
    assert results[1].document_name == "Amina_Mushi_cv_charles"
    assert results[3].document_name == "Amina_Mushi_letter_pacific"
    assert len({r.pdf_path for r in results if r.success}) == 4

    lines = event_logging.GENERATION_EVENTS_FILE.read_text().splitlines()
    assert len(lines) == 2 * len(jobs)
    assert all(json.loads(line)["event_type"].startswith("generation_") for line in lines)


@pytest.mark.integration
def test_document_name_is_file_safe(full_cv):
    """Test output stem derivation."""
    info = full_cv.personal_info.model_copy(update={"first_name": "Amina/", "last_name": "Mushi Jr."})
    cv = full_cv.model_copy(update={"personal_info": info})

    assert document_name_for(cv, "oliver") == "Amina_Mushi_Jr_cv_oliver"
    assert document_name_for(CVData(), None) == "CV_cv_default"


@pytest.mark.integration
def test_generate_batch_suffix_never_reuses_a_name(minimal_cv, isolated_outputs, monkeypatch):
    """Test that a suffixed name does not collide with a job already using that name."""
    from chapchap.contexts.rendering import renderer

    stems = iter(["Amina_cv", "Amina_cv", "Amina_cv_2"])
    monkeypatch.setattr(renderer, "document_name_for", lambda document, template_id: next(stems))

    results = generate_batch(
        [(minimal_cv, "oliver")] * 3, "primitive", output_dir=isolated_outputs / "out", max_workers=1
    )

    assert [r.document_name for r in results] == ["Amina_cv", "Amina_cv_2", "Amina_cv_2_2"]
    assert all(r.success for r in results)
    assert len(list((isolated_outputs / "out").glob("*.pdf"))) == 3


@pytest.mark.integration
@pytest.mark.parametrize(
    "overrides",
    [{"color_override": "teal"}, {"presets": ["bogus"]}],
    ids=["bad-colour", "unknown-preset"],
)
def test_bad_style_choice_reported_not_raised(full_cv, isolated_outputs, overrides):
    """Test that a rejected colour or preset gives the user message, not an exception."""
    output_dir = isolated_outputs / "out"
    result = generate_document(full_cv, "oliver", output_dir=output_dir, **overrides)

    assert not result.success
    assert result.error_kind == "style_override_error"
    assert result.user_message == USER_ERROR_MESSAGE
    assert not output_dir.exists() or list(output_dir.iterdir()) == []
    assert _events()[-1]["event_type"] == "generation_failed"
