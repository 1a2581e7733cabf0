"""Errores del pipeline de build.

Todos heredan de `BuildError` para que la capa HTTP/CLI pueda tratarlos de
forma uniforme; `WorkflowFailedError` lleva la ejecución para reportarla.
"""

from __future__ import annotations

from core.domain.models import WorkflowRun


class BuildError(Exception):
    """Base error for any failed build stage."""


class RemoteCallError(BuildError):
    """GitHub answered with a non-success status."""

    def __init__(self, action: str, status_code: int, body: str) -> None:
        self.action = action
        self.status_code = status_code
        self.body = body
        super().__init__(f"{action} ({status_code}): {body}")


class ArtifactNotFoundError(BuildError):
    """An expected named resource (artifact, archive entry) is missing."""


class PollTimeoutError(BuildError):
    """No completed run was observed within the poll budget."""


class WorkflowFailedError(BuildError):
    """The run completed with a conclusion other than success."""

    def __init__(self, run: WorkflowRun) -> None:
        self.run = run
        super().__init__("Workflow did not succeed.")
