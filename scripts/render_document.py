#!/usr/bin/env python3
"""
Document Rendering CLI

Renders CV and cover-letter drafts (YAML or JSON files) to PDF using the
rendering context.

Commands:
    render       - Render a single draft to PDF
    layout       - Show the page layout computed for a draft
    templates    - List registered templates
    batch        - Render several drafts concurrently
    letter-body  - Print the default paragraphs generated for a letter draft

Examples:\n

    render_document.py render drafts/amina.yaml --template oliver

    render_document.py render drafts/amina.yaml -t grace-mint --color "#0F766E" --check

    render_document.py layout drafts/amina.yaml -t charles

    render_document.py templates --type letter

    render_document.py batch drafts/*.yaml --workers 4
"""

import json
import os
from pathlib import Path
from typing import List, Optional

import typer
from dotenv import load_dotenv
from typing_extensions import Annotated

from chapchap.contexts.drafting import ValidationError, generate_letter_body, load_document
from chapchap.contexts.drafting.document_model import LetterData
from chapchap.contexts.rendering import (
    analyze_layout,
    available_backends,
    generate_batch,
    generate_document,
    layout,
)
from chapchap.contexts.rendering.renderer import prepare_document
from chapchap.contexts.templating import get_registry
from chapchap.exceptions import DocumentGenerationError

load_dotenv()
RENDER_BACKEND = os.getenv("RENDER_BACKEND", "primitive")


def display_path(path: Path) -> str:
    """Return path relative to the working directory for cleaner display."""
    try:
        return str(Path(path).resolve().relative_to(Path.cwd()))
    except ValueError:
        return str(path)


def _load(draft: Path):
    try:
        return load_document(draft)
    except (FileNotFoundError, ValidationError) as e:
        typer.secho(f"Error: {e}\n", fg=typer.colors.RED, err=True)
        raise typer.Exit(code=1)


app = typer.Typer(
    help="Render CV and cover-letter drafts to PDF",
    add_completion=False,
    invoke_without_command=True,
)


@app.callback()
def main(ctx: typer.Context):
    """Show help by default when no command is provided."""
    if ctx.invoked_subcommand is None:
        typer.echo(ctx.get_help())
        raise typer.Exit()


@app.command("render")
def render_command(
    draft: Annotated[Path, typer.Argument(help="Draft file (.yaml, .yml or .json)")],
    template_id: Annotated[
        Optional[str],
        typer.Option("--template", "-t", help="Template id (default: the draft's templateId)"),
    ] = None,
    backend: Annotated[
        str,
        typer.Option("--backend", "-b", help=f"Render backend ({', '.join(available_backends())})"),
    ] = RENDER_BACKEND,
    output_dir: Annotated[
        Optional[Path],
        typer.Option("--output-dir", "-o", help="Directory for the PDF (default: RESULTS_PATH/<date>)"),
    ] = None,
    color: Annotated[
        Optional[str],
        typer.Option("--color", "-c", help="Primary colour override, e.g. '#0F766E'"),
    ] = None,
    presets: Annotated[
        Optional[List[str]],
        typer.Option("--preset", "-p", help="Style preset (repeatable), e.g. spacing_tight"),
    ] = None,
    check: Annotated[
        bool,
        typer.Option("--check", help="Read the PDF back and compare it with the computed layout"),
    ] = False,
):
    """
    Render a draft to PDF.

    Examples:\n

        $ render_document.py render drafts/amina.yaml -t oliver

        $ render_document.py render drafts/letter.yaml -t contempo --backend raster
    """
    document = _load(draft)
    typer.secho(f"\nRendering: {display_path(draft)}", fg=typer.colors.BLUE, bold=True)
    typer.echo(f"Template: {template_id or document.template_id}")
    typer.echo(f"Backend: {backend}")
    typer.echo("")

    result = generate_document(
        document, template_id, backend, output_dir=output_dir, color_override=color, presets=presets
    )

    typer.echo("")
    if not result.success:
        typer.secho(f"✗ {result.user_message}", fg=typer.colors.RED, bold=True)
        typer.echo(f"  Kind: {result.error_kind}")
        if result.block_index is not None:
            typer.echo(f"  Block: {result.block_index}")
        if result.log_dir:
            typer.echo(f"  Log: {display_path(result.log_dir / 'render.log')}")
        typer.echo("")
        raise typer.Exit(code=1)

    typer.secho("✓ Document generated", fg=typer.colors.GREEN, bold=True)
    typer.echo(f"  Pages: {result.page_count}")
    typer.echo(f"  PDF: {display_path(result.pdf_path)}")

    if check:
        if backend != "primitive":
            typer.secho("  Check skipped: only primitive PDFs have a text layer", fg=typer.colors.YELLOW)
        else:
            computed = layout(
                prepare_document(document), template_id, color_override=color, presets=presets
            )
            diagnostics = analyze_layout(computed, result.pdf_path)
            if diagnostics.is_valid:
                typer.secho("  ✓ PDF matches the computed layout", fg=typer.colors.GREEN)
            else:
                typer.secho("  ✗ PDF differs from the computed layout", fg=typer.colors.RED)
                for issue in diagnostics.get_inherited_issues()[:10]:
                    typer.echo(f"    - {issue}")
    typer.echo("")


@app.command("layout")
def layout_command(
    draft: Annotated[Path, typer.Argument(help="Draft file (.yaml, .yml or .json)")],
    template_id: Annotated[
        Optional[str],
        typer.Option("--template", "-t", help="Template id (default: the draft's templateId)"),
    ] = None,
    as_json: Annotated[bool, typer.Option("--json", help="Print the layout as JSON")] = False,
):
    """
    Show which blocks land on which page, without writing a PDF.
    """
    document = prepare_document(_load(draft))
    try:
        result = layout(document, template_id)
    except DocumentGenerationError as e:
        typer.secho(f"Error ({e.kind}): {e}\n", fg=typer.colors.RED, err=True)
        raise typer.Exit(code=1)

    summary = result.to_dict()
    if as_json:
        typer.echo(json.dumps(summary, indent=2, ensure_ascii=False))
        return

    typer.secho(f"\n{summary['title']}: {result.page_count} page(s)", fg=typer.colors.BLUE, bold=True)
    for page in summary["pages"]:
        typer.secho(
            f"\nPage {page['index'] + 1} ({page['used_height']}/{summary['content_height']} pt)",
            bold=True,
        )
        for block in page["blocks"]:
            typer.echo(
                f"  [{block['index']:>3}] {block['kind']:<11} y={block['y']:<7} "
                f"h={block['height']:<6} {block['text']}"
            )
    typer.echo("")


@app.command("templates")
def templates_command(
    document_type: Annotated[
        Optional[str],
        typer.Option("--type", help="Only list templates for 'cv' or 'letter'"),
    ] = None,
):
    """List registered templates."""
    registry = get_registry()
    for template_id in registry.list_templates(document_type):
        try:
            definition = registry.get(template_id)
        except DocumentGenerationError as e:
            typer.secho(f"  {template_id:<22} (invalid: {e})", fg=typer.colors.RED)
            continue
        variant = f" [extends {definition.extends}]" if definition.extends else ""
        typer.echo(
            f"  {template_id:<22} {definition.document_type:<7} {definition.category:<13}"
            f"{definition.description}{variant}"
        )


@app.command("batch")
def batch_command(
    drafts: Annotated[List[Path], typer.Argument(help="Draft files")],
    template_id: Annotated[
        Optional[str],
        typer.Option("--template", "-t", help="Template id for every draft (default: each draft's own)"),
    ] = None,
    backend: Annotated[str, typer.Option("--backend", "-b", help="Render backend")] = RENDER_BACKEND,
    output_dir: Annotated[
        Optional[Path], typer.Option("--output-dir", "-o", help="Directory for the PDFs")
    ] = None,
    workers: Annotated[int, typer.Option("--workers", "-w", min=1, max=32)] = 4,
):
    """
    Render several drafts concurrently.

    Examples:\n

        $ render_document.py batch drafts/*.yaml -t grace-navy -w 8
    """
    jobs = [(_load(draft), template_id) for draft in drafts]
    results = generate_batch(jobs, backend, output_dir=output_dir, max_workers=workers)

    typer.echo("")
    for draft, result in zip(drafts, results):
        if result.success:
            typer.secho(f"  ✓ {display_path(draft)} -> {display_path(result.pdf_path)}", fg=typer.colors.GREEN)
        else:
            typer.secho(f"  ✗ {display_path(draft)} ({result.error_kind})", fg=typer.colors.RED)

    succeeded = sum(1 for r in results if r.success)
    typer.echo(f"\n{succeeded}/{len(results)} succeeded\n")
    raise typer.Exit(code=0 if succeeded == len(results) else 1)


@app.command("letter-body")
def letter_body_command(
    draft: Annotated[Path, typer.Argument(help="Letter draft file")],
):
    """Print the default paragraphs generated from a letter's job and strengths."""
    document = _load(draft)
    if not isinstance(document, LetterData):
        typer.secho("Error: not a letter draft\n", fg=typer.colors.RED, err=True)
        raise typer.Exit(code=1)

    typer.echo("")
    for paragraph in generate_letter_body(document):
        typer.echo(paragraph)
        typer.echo("")


if __name__ == "__main__":
    app()
