"""Typer CLI for compiling and rendering spreadsheet templates."""

from __future__ import annotations

import json
from pathlib import Path
from typing import Optional

import typer

from .config import RenderJob, load_payload
from .errors import SheetSchemaError
from .excel_reader import load_template, read_template, select_sheet
from .excel_writer import render_template
from .parser import compile_schema
from .utils.log import get_logger

app = typer.Typer(help="Compile spreadsheet templates against data payloads.")
logger = get_logger("cli")


@app.command("schema")
def schema_command(
    template: Path = typer.Argument(..., exists=True, dir_okay=False, help="Template workbook."),
    data: Path = typer.Option(..., "--data", exists=True, dir_okay=False, help="YAML/JSON payload."),
    sheet: Optional[str] = typer.Option(None, help="Template sheet name (defaults to active)."),
    limit: int = typer.Option(20, help="Preview row limit."),
    as_json: bool = typer.Option(False, "--json", help="Print the full schema as JSON."),
) -> None:
    """Compile a template and show the resulting schema."""

    try:
        ws = select_sheet(load_template(template), sheet)
        values, merges = read_template(ws)
        schema = compile_schema(values, load_payload(data), merges)
    except SheetSchemaError as exc:
        raise typer.BadParameter(str(exc)) from exc

    if as_json:
        typer.echo(json.dumps(schema.to_dict(), ensure_ascii=False, indent=2, default=str))
        return

    actions = ", ".join(f"{a.action.value}@{a.row}" for a in schema.rows) or "none"
    typer.echo(f"Row actions: {actions}")
    typer.echo(f"Merges: {', '.join(sorted(schema.merges)) or 'none'}")
    frame = schema.cells_frame()
    typer.echo(f"Resolved {len(frame)} cells")
    if not frame.empty:
        typer.echo(frame.head(limit).to_string(index=False))


@app.command("render")
def render_command(
    template: Path = typer.Argument(..., exists=True, dir_okay=False, help="Template workbook."),
    data: Path = typer.Option(..., "--data", exists=True, dir_okay=False, help="YAML/JSON payload."),
    out: Path = typer.Option(..., "--out", help="Output workbook path."),
    sheet: Optional[str] = typer.Option(None, help="Template sheet name (defaults to active)."),
    dry_run: bool = typer.Option(False, help="Compile only; do not write the workbook."),
) -> None:
    """Render a payload into a template workbook."""

    logger.info("Rendering %s", template)
    try:
        output = render_template(template, load_payload(data), out, sheet=sheet, dry_run=dry_run)
    except SheetSchemaError as exc:
        raise typer.BadParameter(str(exc)) from exc
    typer.echo(f"{'Planned' if dry_run else 'Written'}: {output}")


@app.command("run")
def run_command(
    job: Path = typer.Argument(..., exists=True, dir_okay=False, help="Render job YAML."),
) -> None:
    """Render a workbook described by a job file."""

    try:
        render_job = RenderJob.from_yaml(job)
        output = render_template(
            render_job.template,
            render_job.load_data(),
            render_job.output,
            sheet=render_job.sheet,
            dry_run=render_job.dry_run,
        )
    except SheetSchemaError as exc:
        raise typer.BadParameter(str(exc)) from exc
    typer.echo(f"{'Planned' if render_job.dry_run else 'Written'}: {output}")


def main() -> None:
    app()


if __name__ == "__main__":
    main()
