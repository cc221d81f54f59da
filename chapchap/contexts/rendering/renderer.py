"""
Document Rendering

Entry points that run the whole pipeline:

    draft -> template definition -> sections -> blocks -> pages -> PDF bytes

render() and layout() are pure computations that raise the typed errors of
each stage. generate_document() wraps render() with per-run logging, the
generation event log and an atomic write of the PDF, and turns any failure
into a single user-facing message.
"""

import os
import re
import tempfile
import time
from concurrent.futures import ThreadPoolExecutor
from concurrent.futures import TimeoutError as FutureTimeoutError
from dataclasses import dataclass
from pathlib import Path
from typing import Callable, List, Optional, Sequence, Tuple, TypeVar

from dotenv import load_dotenv

from chapchap.contexts.drafting.document_model import Document, LetterData
from chapchap.contexts.drafting.letter_body import with_default_body
from chapchap.contexts.drafting.validation import validate_document
from chapchap.contexts.rendering.backends import RenderOutput, get_backend
from chapchap.contexts.rendering.exceptions import RenderTimeoutError
from chapchap.contexts.rendering.geometry import LayoutResult
from chapchap.contexts.rendering.layout_engine import paginate
from chapchap.contexts.rendering.logger import (
    _log_debug,
    _log_info,
    log_render_result,
    log_render_start,
    setup_rendering_logger,
)
from chapchap.contexts.rendering.measure import measure_sections
from chapchap.contexts.templating.config_resolver import apply_overrides, apply_presets
from chapchap.contexts.templating.registries import TemplateRegistry, get_registry
from chapchap.contexts.templating.section_builder import build_sections
from chapchap.exceptions import DocumentGenerationError
from chapchap.utils.event_logging import log_generation_event
from chapchap.utils.timestamp import long_date, now, today

load_dotenv()

LOGS_PATH = Path(os.getenv("LOGS_PATH", "outs/logs"))
RESULTS_PATH = Path(os.getenv("RESULTS_PATH", "outs/results"))
RENDER_BACKEND = os.getenv("RENDER_BACKEND", "primitive")
# 0 disables the limit
RENDER_TIMEOUT_S = float(os.getenv("RENDER_TIMEOUT_S", "60"))

USER_ERROR_MESSAGE = "Could not generate your document, please try again."

T = TypeVar("T")


def _resolve_template_id(document: Document, template_id: Optional[str]) -> Optional[str]:
    return template_id or document.template_id


def layout(
    document: Document,
    template_id: Optional[str] = None,
    *,
    color_override: Optional[str] = None,
    presets: Optional[List[str]] = None,
    registry: Optional[TemplateRegistry] = None,
) -> LayoutResult:
    """
    Compute the paginated layout of a document without drawing it.

    Steps run in a fixed order and each failure stops the pipeline before
    anything further is computed:
    1. Resolve the template (UnknownTemplateError)
    2. Validate the draft (ValidationError)
    3. Build sections, measure and paginate (LayoutError)

    Args:
        document: CV or letter draft
        template_id: Registered template id (defaults to document.template_id)
        color_override: Hex colour replacing the template's primary colour
        presets: Named style presets applied before the colour override
        registry: Template registry (default: process-wide registry)

    Returns:
        LayoutResult; equal inputs give equal results
    """
    registry = registry or get_registry()
    definition = registry.get(_resolve_template_id(document, template_id), document.document_type)
    validate_document(document)

    definition = apply_presets(definition, presets or [])
    definition = apply_overrides(definition, color_override=color_override)
    sections = build_sections(definition, document)
    measured, frame, styles = measure_sections(sections, definition.style)
    return paginate(measured, frame, styles, title=document.display_name)


def _run_with_timeout(task: Callable[[], T], timeout_s: float, backend: str) -> T:
    """Run task, raising RenderTimeoutError if it takes longer than timeout_s."""
    if not timeout_s:
        return task()

    executor = ThreadPoolExecutor(max_workers=1)
    future = executor.submit(task)
    try:
        return future.result(timeout=timeout_s)
    except FutureTimeoutError as e:
        future.cancel()
        raise RenderTimeoutError(timeout_s, backend=backend) from e
    finally:
        # A timed-out task finishes in the background; its result is discarded
        executor.shutdown(wait=False)


def render_output(
    document: Document,
    template_id: Optional[str] = None,
    backend: Optional[str] = None,
    *,
    color_override: Optional[str] = None,
    timeout_s: Optional[float] = None,
    presets: Optional[List[str]] = None,
    registry: Optional[TemplateRegistry] = None,
) -> RenderOutput:
    """Same as render() but returns the backend's full RenderOutput."""
    backend = backend or RENDER_BACKEND
    timeout_s = RENDER_TIMEOUT_S if timeout_s is None else timeout_s

    registry = registry or get_registry()
    registry.get(_resolve_template_id(document, template_id), document.document_type)
    validate_document(document)
    renderer = get_backend(backend)

    def task() -> RenderOutput:
        result = layout(
            document, template_id, color_override=color_override, presets=presets, registry=registry
        )
        return renderer.render(result)

    output = _run_with_timeout(task, timeout_s, backend)
    _log_debug(f"Rendered {output.page_count} page(s) with '{backend}' backend")
    return output


def render(
    document: Document,
    template_id: Optional[str] = None,
    backend: Optional[str] = None,
    *,
    color_override: Optional[str] = None,
    timeout_s: Optional[float] = None,
) -> bytes:
    """
    Render a draft to PDF bytes.

    Args:
        document: CV or letter draft
        template_id: Registered template id (defaults to document.template_id)
        backend: "primitive" or "raster" (default: RENDER_BACKEND)
        color_override: Hex colour replacing the template's primary colour
        timeout_s: Time limit in seconds (default: RENDER_TIMEOUT_S, 0 = none)

    Returns:
        Complete PDF document. Partial output is never returned.

    Raises:
        UnknownTemplateError: Template id not registered for this document type
        ValidationError: Draft missing mandatory fields
        LayoutError: A block cannot fit on an empty page
        RenderBackendError: Drawing failed (RenderTimeoutError on timeout)
    """
    return render_output(
        document, template_id, backend, color_override=color_override, timeout_s=timeout_s
    ).pdf_bytes


# =============================================================================
# Generation orchestration
# =============================================================================


@dataclass
class GenerationResult:
    """
    Outcome of generate_document().

    Attributes:
        success: Whether a PDF was written
        document_name: Output file stem
        pdf_path: Final PDF path (None on failure)
        page_count: Pages in the PDF
        error_kind: Internal error kind (e.g. "layout_error"), for logs only
        error: Internal error message, for logs only
        block_index: Offending block for layout errors
        user_message: Message safe to show the user (None on success)
        elapsed_s: Wall time of the run
        log_dir: Directory holding this run's detailed log
    """

    success: bool
    document_name: str
    pdf_path: Optional[Path] = None
    page_count: Optional[int] = None
    error_kind: Optional[str] = None
    error: Optional[str] = None
    block_index: Optional[int] = None
    user_message: Optional[str] = None
    elapsed_s: float = 0.0
    log_dir: Optional[Path] = None


def prepare_document(document: Document) -> Document:
    """Fill what a letter draft may still lack: today's date and the default body."""
    if isinstance(document, LetterData):
        document = with_default_body(document)
        if not document.date:
            document = document.model_copy(update={"date": long_date()})
    return document


def document_name_for(document: Document, template_id: Optional[str]) -> str:
    """File-safe stem, e.g. Amina_Mushi_cv_oliver."""
    stem = re.sub(r"[^A-Za-z0-9]+", "_", document.display_name).strip("_") or "document"
    return f"{stem}_{document.document_type}_{template_id or 'default'}"


def _write_atomic(data: bytes, path: Path) -> Path:
    """Write bytes so that `path` either does not exist or holds the complete file."""
    path.parent.mkdir(parents=True, exist_ok=True)
    fd, temp_name = tempfile.mkstemp(dir=path.parent, prefix=f".{path.stem}.", suffix=".part")
    try:
        with os.fdopen(fd, "wb") as f:
            f.write(data)
        os.replace(temp_name, path)
    except OSError:
        Path(temp_name).unlink(missing_ok=True)
        raise
    return path


def generate_document(
    document: Document,
    template_id: Optional[str] = None,
    backend: Optional[str] = None,
    *,
    output_dir: Optional[Path] = None,
    color_override: Optional[str] = None,
    timeout_s: Optional[float] = None,
    presets: Optional[List[str]] = None,
    document_name: Optional[str] = None,
    setup_logging: bool = True,
) -> GenerationResult:
    """
    Render a draft and save the PDF, with logging and event tracking.

    Orchestration around render():
        - Sets up a timestamped log directory (Tier 1 log)
        - Records generation_started / generation_completed / generation_failed
          events (Tier 2 log)
        - Writes the PDF atomically to output_dir (default RESULTS_PATH/YYYY-MM-DD/)
        - Never raises for generation errors: the result carries the internal
          error kind for logs and USER_ERROR_MESSAGE for the user

    Args:
        document: CV or letter draft
        template_id: Registered template id (defaults to document.template_id)
        backend: Backend name (default: RENDER_BACKEND)
        output_dir: Directory for the PDF
        color_override: Hex colour replacing the template's primary colour
        timeout_s: Time limit in seconds
        presets: Named style presets
        document_name: Output file stem (default: derived from the draft)
        setup_logging: Configure the per-run logger (off when called from a batch)

    Returns:
        GenerationResult
    """
    template_id = _resolve_template_id(document, template_id)
    backend = backend or RENDER_BACKEND
    name = document_name or document_name_for(document, template_id)

    log_dir = None
    log_file = None
    if setup_logging:
        log_dir = LOGS_PATH / f"render_{now()}"
        log_file = setup_rendering_logger(log_dir)
    log_render_start(name, str(template_id), backend, log_file)
    log_generation_event(
        "generation_started", name, source="rendering", template_id=template_id, backend=backend
    )

    results_dir = Path(output_dir) if output_dir is not None else RESULTS_PATH / today()
    start_time = time.time()

    try:
        output = render_output(
            prepare_document(document),
            template_id,
            backend,
            color_override=color_override,
            timeout_s=timeout_s,
            presets=presets,
        )
        pdf_path = _write_atomic(output.pdf_bytes, results_dir / f"{name}.pdf")
        result = GenerationResult(
            success=True,
            document_name=name,
            pdf_path=pdf_path,
            page_count=output.page_count,
            log_dir=log_dir,
        )
    except (DocumentGenerationError, OSError) as e:
        result = GenerationResult(
            success=False,
            document_name=name,
            error_kind=getattr(e, "kind", "io_error"),
            error=str(e),
            block_index=getattr(e, "block_index", None),
            user_message=USER_ERROR_MESSAGE,
            log_dir=log_dir,
        )

    result.elapsed_s = time.time() - start_time
    log_render_result(name, result, result.elapsed_s)

    if result.success:
        log_generation_event(
            "generation_completed",
            name,
            source="rendering",
            template_id=template_id,
            backend=backend,
            page_count=result.page_count,
            pdf_path=str(result.pdf_path),
            generation_time_s=round(result.elapsed_s, 2),
        )
    else:
        log_generation_event(
            "generation_failed",
            name,
            source="rendering",
            template_id=template_id,
            backend=backend,
            error_kind=result.error_kind,
            block_index=result.block_index,
        )
    return result


def generate_batch(
    jobs: Sequence[Tuple[Document, Optional[str]]],
    backend: Optional[str] = None,
    *,
    output_dir: Optional[Path] = None,
    max_workers: int = 4,
) -> List[GenerationResult]:
    """
    Generate independent documents concurrently.

    Args:
        jobs: (document, template_id) pairs; template_id None uses the draft's own
        backend: Backend name for every job
        output_dir: Directory for the PDFs
        max_workers: Worker threads

    Returns:
        One GenerationResult per job, in input order
    """
    log_dir = LOGS_PATH / f"batch_{now()}"
    setup_rendering_logger(log_dir)
    _log_info(f"Generating {len(jobs)} document(s) with {max_workers} worker(s)")

    # Repeated names get a numeric suffix so no job overwrites another
    names = []
    used = set()
    for document, template_id in jobs:
        base = document_name_for(document, _resolve_template_id(document, template_id))
        name = base
        suffix = 2
        while name in used:
            name = f"{base}_{suffix}"
            suffix += 1
        used.add(name)
        names.append(name)

    def run(job_index: int) -> GenerationResult:
        document, template_id = jobs[job_index]
        return generate_document(
            document,
            template_id,
            backend,
            output_dir=output_dir,
            document_name=names[job_index],
            setup_logging=False,
        )

    with ThreadPoolExecutor(max_workers=max_workers) as executor:
        results = list(executor.map(run, range(len(jobs))))

    succeeded = sum(1 for r in results if r.success)
    _log_info(f"Batch finished: {succeeded}/{len(results)} succeeded")
    return results
