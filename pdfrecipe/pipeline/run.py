from __future__ import annotations

import hashlib
import logging
import re
import shutil
from pathlib import Path
from typing import List, Optional

from slugify import slugify
from sqlmodel import select

from .. import config
from ..models import RenderJob, RenderStatus, get_session, init_db
from ..storage import artifact_path, pdf_path, record_artifacts
from .dispatch import RENDERED, ItemOutcome
from .errors import RecipeRenderError
from .ingest import load_dataset, load_recipe
from .render_pdf import render_pdf, write_instructions
from .render_preview import render_preview


logger = logging.getLogger(__name__)


def slug_from_name(name: str) -> str:
    slug = slugify(name)
    slug = re.sub(r"[^a-z0-9-]+", "-", slug.lower()).strip("-")
    if not slug:
        slug = hashlib.md5(name.encode("utf-8")).hexdigest()[:12]
    return slug


def _prepare_temp_dir(slug: str) -> Path:
    temp_dir = config.OUT_DIR / f"{slug}.tmp"
    if temp_dir.exists():
        shutil.rmtree(temp_dir)
    temp_dir.mkdir(parents=True, exist_ok=True)
    return temp_dir


def _finalize_artifacts(
    temp_dir: Path,
    final_dir: Path,
    artifacts: List[tuple[str, Path]],
) -> List[tuple[str, Path]]:
    if final_dir.exists():
        shutil.rmtree(final_dir)
    temp_dir.replace(final_dir)
    finalized: List[tuple[str, Path]] = []
    for artifact_type, path in artifacts:
        finalized.append((artifact_type, final_dir / path.relative_to(temp_dir)))
    return finalized


def _relocate_pdf(artifacts: List[tuple[str, Path]], location: str) -> List[tuple[str, Path]]:
    target_dir = Path(location).expanduser()
    target_dir.mkdir(parents=True, exist_ok=True)
    moved: List[tuple[str, Path]] = []
    for artifact_type, path in artifacts:
        if artifact_type == "pdf":
            target = target_dir / path.name
            shutil.move(str(path), str(target))
            path = target
        moved.append((artifact_type, path))
    return moved


def describe_outcomes(outcomes: List[ItemOutcome]) -> List[str]:
    return [
        f"item {o.index} ({o.item_type or '?'}): {o.status} - {o.detail}"
        for o in outcomes
        if o.status != RENDERED
    ]


def _save_job(job: RenderJob) -> RenderJob:
    with get_session() as session:
        session.add(job)
        session.commit()
        session.refresh(job)
    return job


def render_job(
    recipe_path: Path,
    data_path: Path,
    strict: Optional[bool] = None,
    preview: bool = True,
) -> RenderJob:
    """
    Render one recipe against one dataset and record the run in the ledger.

    Artifacts are built in ``OUT_DIR/<slug>.tmp`` and moved to
    ``OUT_DIR/<slug>`` only once everything was written.
    """
    init_db()
    strict = config.STRICT_BINDINGS if strict is None else strict
    job = RenderJob(slug="", recipe_path=str(recipe_path), data_path=str(data_path))

    try:
        recipe = load_recipe(recipe_path)
        dataset = load_dataset(data_path)
    except (FileNotFoundError, ValueError) as exc:
        logger.exception("Could not load inputs for %s", recipe_path)
        job.slug = slug_from_name(Path(recipe_path).stem)
        job.fail_code = "LOAD_ERROR"
        job.fail_detail = str(exc)
        return _save_job(job)

    pdf_name = Path(recipe.page.pdf_name or config.DEFAULT_PDF_NAME).name
    job.slug = slug_from_name(pdf_name)
    job.item_count = len(recipe.contents)
    temp_dir = _prepare_temp_dir(job.slug)
    artifacts: List[tuple[str, Path]] = []

    try:
        output = pdf_path(job.slug, pdf_name, base_dir=temp_dir, include_slug=False)
        outcomes, calls = render_pdf(recipe, dataset, output, strict=strict)
        artifacts.append(("pdf", output))

        instructions = artifact_path(job.slug, "instructions", base_dir=temp_dir, include_slug=False)
        artifacts.append(("instructions", write_instructions(calls, instructions)))

        if preview:
            artifacts.append(("preview", render_preview(job.slug, output, base_dir=temp_dir, include_slug=False)))

        problems = describe_outcomes(outcomes)
        if problems:
            error_path = artifact_path(job.slug, "error", base_dir=temp_dir, include_slug=False)
            error_path.write_text("\n".join(problems), encoding="utf-8")
            artifacts.append(("error", error_path))

        artifacts = _finalize_artifacts(temp_dir, config.OUT_DIR / job.slug, artifacts)
        if recipe.page.pdf_location:
            artifacts = _relocate_pdf(artifacts, recipe.page.pdf_location)
    except (RecipeRenderError, OSError, RuntimeError) as exc:
        logger.exception("Render failed for %s", job.slug)
        shutil.rmtree(temp_dir, ignore_errors=True)
        job.fail_code = "RENDER_ERROR"
        job.fail_detail = str(exc)
        return _save_job(job)

    job.rendered_count = sum(1 for o in outcomes if o.status == RENDERED)
    if problems:
        job.status = RenderStatus.PARTIAL
        job.fail_code = "ITEM_ERRORS"
        job.fail_detail = problems[0]
    else:
        job.status = RenderStatus.READY
    _save_job(job)
    record_artifacts(job, artifacts)
    logger.info("Rendered %s: %d/%d items", job.slug, job.rendered_count, job.item_count)
    return job


def list_jobs(limit: int = 20) -> List[RenderJob]:
    init_db()
    with get_session() as session:
        statement = select(RenderJob).order_by(RenderJob.id.desc()).limit(limit)
        return list(session.exec(statement))
