"""Remote APK build orchestration.

The HTTP handler and the CLI both delegate the whole flow to `build_apk`:
publish the source archive, dispatch the workflow, wait for the run and pull
the APK out of its artifact. Each stage is also exposed on its own so that
callers (and tests) can drive them independently. Side-effects for UI layers
(progress, status lines) go through `PipelineHooks`.
"""

from __future__ import annotations

import asyncio
import logging
from dataclasses import dataclass
from datetime import datetime, timedelta, timezone
from typing import Awaitable, Callable

from adapters.artifact_unpacker import extract_entry_by_suffix
from core.config import AppSettings
from core.domain.errors import ArtifactNotFoundError, PollTimeoutError, WorkflowFailedError
from core.domain.models import ApkArtifact, BuildResult, WorkflowRun
from core.interfaces.build_host import BuildHost

logger = logging.getLogger(__name__)

Sleep = Callable[[float], Awaitable[None]]


@dataclass
class PipelineHooks:
    """Optional callbacks for UI layers (progress, stage changes)."""

    stage: Callable[[str], None] | None = None
    poll: Callable[[int, int, WorkflowRun | None], None] | None = None


def _emit_stage(hooks: PipelineHooks | None, name: str) -> None:
    if hooks and hooks.stage:
        hooks.stage(name)


def _is_stale(run: WorkflowRun, since: datetime | None, skew_seconds: float) -> bool:
    if since is None or run.created_at is None:
        return False
    created = run.created_at
    if created.tzinfo is None:
        created = created.replace(tzinfo=timezone.utc)
    return created < since - timedelta(seconds=skew_seconds)


async def publish_source(host: BuildHost, settings: AppSettings, archive: bytes) -> str | None:
    """Create or overwrite the source archive on the build branch."""

    existing = await host.get_file(settings.source_path, ref=settings.github_branch)
    if existing.exists:
        logger.debug("Existing %s found (sha=%s)", existing.path, existing.sha)

    commit_sha = await host.put_file(
        settings.source_path,
        archive,
        branch=settings.github_branch,
        message=settings.commit_message,
        sha=existing.sha,
    )
    logger.info("Uploaded ZIP, commit: %s", commit_sha)
    return commit_sha


async def dispatch_build(host: BuildHost, settings: AppSettings) -> None:
    await host.dispatch_workflow(settings.workflow_file, ref=settings.github_branch)
    logger.info("Workflow dispatch triggered.")


async def wait_for_run(
    host: BuildHost,
    settings: AppSettings,
    *,
    since: datetime | None = None,
    sleep: Sleep = asyncio.sleep,
    hooks: PipelineHooks | None = None,
) -> WorkflowRun:
    """Poll the most recent run of the workflow until it completes.

    Performs at most `poll_max_attempts` checks spaced by `poll_delay_seconds`.
    When `since` is given, runs created before it (minus the clock-skew
    tolerance) count as "no run yet"; `created_at` comes from GitHub and `since`
    from the local clock, so a host clock running fast by more than the
    tolerance hides every new run until the poll budget runs out.
    """

    max_attempts = settings.poll_max_attempts
    for attempt in range(1, max_attempts + 1):
        logger.info("Polling workflow runs (attempt %d/%d)", attempt, max_attempts)

        run = await host.latest_run(settings.workflow_file, branch=settings.github_branch)
        if run is not None and _is_stale(run, since, settings.run_clock_skew_seconds):
            logger.info("Latest run %s predates the dispatch, ignoring it.", run.id)
            run = None

        if hooks and hooks.poll:
            hooks.poll(attempt, max_attempts, run)

        if run is None:
            logger.info("No workflow run found yet.")
        else:
            logger.info("Latest run: id=%s, status=%s, conclusion=%s", run.id, run.status, run.conclusion)
            if run.is_completed:
                return run

        if attempt < max_attempts:
            await sleep(settings.poll_delay_seconds)

    raise PollTimeoutError("Timeout waiting for workflow run to complete.")


async def fetch_apk(host: BuildHost, settings: AppSettings, run: WorkflowRun) -> ApkArtifact:
    """Download the run's named artifact and extract the APK from it."""

    artifacts = await host.list_artifacts(run.id)
    artifact = next((a for a in artifacts if a.name == settings.artifact_name), None)
    if artifact is None:
        logger.error("Available artifacts: %s", [a.name for a in artifacts])
        raise ArtifactNotFoundError(f'Artifact "{settings.artifact_name}" not found.')

    bundle = await host.download_artifact(artifact)
    return extract_entry_by_suffix(bundle, settings.apk_suffix)


async def build_apk(
    *,
    host: BuildHost,
    settings: AppSettings,
    archive: bytes,
    hooks: PipelineHooks | None = None,
    sleep: Sleep = asyncio.sleep,
) -> BuildResult:
    """Run the full pipeline for one source archive.

    Raises `WorkflowFailedError` when the run completes unsuccessfully; no
    artifact is requested in that case.
    """

    _emit_stage(hooks, "publish")
    commit_sha = await publish_source(host, settings, archive)

    _emit_stage(hooks, "dispatch")
    dispatched_at = datetime.now(timezone.utc)
    await dispatch_build(host, settings)

    _emit_stage(hooks, "poll")
    run = await wait_for_run(host, settings, since=dispatched_at, sleep=sleep, hooks=hooks)
    if not run.succeeded:
        raise WorkflowFailedError(run)

    _emit_stage(hooks, "fetch")
    apk = await fetch_apk(host, settings, run)
    return BuildResult(apk=apk, run=run, commit_sha=commit_sha)
