from __future__ import annotations

import logging
from pathlib import Path
from typing import Optional

import typer

from . import config
from .models import RenderStatus, reset_engine
from .pipeline.run import list_jobs, render_job

app = typer.Typer(help="Render PDF recipes (text blocks, tables, bar charts) from a JSON dataset")


def _use_out_dir(out: Optional[Path]) -> None:
    if out:
        config.set_out_dir(out)
        reset_engine()


@app.command()
def render(
    recipe: Path = typer.Option(Path("pdf_recipe.json"), "--recipe", help="Recipe JSON path"),
    data: Path = typer.Option(Path("data.json"), "--data", help="Dataset JSON path"),
    out: Optional[Path] = typer.Option(None, "--out", help="Output directory"),
    strict: bool = typer.Option(False, "--strict", help="Fail items whose data source is missing"),
    preview: bool = typer.Option(True, "--preview/--no-preview", help="Write a PNG of the first page"),
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Log each item as it is rendered"),
) -> None:
    if verbose:
        logging.basicConfig(level=logging.INFO, format="%(levelname)s %(name)s: %(message)s")
    _use_out_dir(out)
    job = render_job(recipe, data, strict=strict or config.STRICT_BINDINGS, preview=preview)
    typer.echo(f"{job.status.value}: {job.slug} ({job.rendered_count}/{job.item_count} items)")
    if job.fail_detail:
        typer.echo(f"{job.fail_code}: {job.fail_detail}")
    if job.status == RenderStatus.FAILED:
        raise typer.Exit(code=1)


@app.command()
def history(
    out: Optional[Path] = typer.Option(None, "--out", help="Output directory"),
    limit: int = typer.Option(20, "--limit", help="Number of jobs to list"),
) -> None:
    _use_out_dir(out)
    jobs = list_jobs(limit=limit)
    if not jobs:
        typer.echo("No renders yet")
        return
    for job in jobs:
        typer.echo(f"{job.id}\t{job.status.value}\t{job.slug}\t{job.rendered_count}/{job.item_count}")


if __name__ == "__main__":
    app()
