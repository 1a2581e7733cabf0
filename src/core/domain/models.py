"""Modelos del dominio (Pydantic v2).

Describen los valores transitorios de una build remota: el archivo publicado,
la ejecución del workflow y los artefactos que produce. Ninguno se persiste;
viven lo que dura una petición.
"""

from __future__ import annotations

from datetime import datetime

from pydantic import BaseModel, Field
from pydantic.config import ConfigDict

RUN_STATUS_COMPLETED = "completed"
RUN_CONCLUSION_SUCCESS = "success"


class RemoteFile(BaseModel):
    """A file in the remote repository, plus its version token when it exists."""

    path: str = Field(
        ...,
        min_length=1,
        description="Path of the file inside the repository.",
    )
    sha: str | None = Field(
        default=None,
        description="Blob sha of the current version; required to overwrite it.",
    )

    @property
    def exists(self) -> bool:
        return self.sha is not None


class WorkflowRun(BaseModel):
    """One execution of the build workflow, as reported by GitHub Actions."""

    model_config = ConfigDict(extra="ignore")

    id: int = Field(
        ...,
        description="Run identifier.",
    )
    status: str = Field(
        ...,
        description="Lifecycle status (queued, in_progress, completed, ...).",
    )
    conclusion: str | None = Field(
        default=None,
        description="Final outcome once completed (success, failure, cancelled, ...).",
    )
    html_url: str | None = Field(
        default=None,
        description="Public URL of the run.",
    )
    head_branch: str | None = Field(
        default=None,
        description="Branch the run was triggered on.",
    )
    created_at: datetime | None = Field(
        default=None,
        description="Creation timestamp (UTC).",
    )

    @property
    def is_completed(self) -> bool:
        return self.status == RUN_STATUS_COMPLETED

    @property
    def succeeded(self) -> bool:
        return self.is_completed and self.conclusion == RUN_CONCLUSION_SUCCESS


class Artifact(BaseModel):
    """A named result bundle attached to a run."""

    model_config = ConfigDict(extra="ignore")

    id: int
    name: str
    archive_download_url: str
    size_in_bytes: int = 0
    expired: bool = False


class ApkArtifact(BaseModel):
    """The binary extracted from an artifact bundle."""

    entry_name: str = Field(
        ...,
        description="Name of the entry inside the artifact zip.",
    )
    content: bytes = Field(
        ...,
        description="Raw bytes of the entry.",
    )


class BuildResult(BaseModel):
    """Output of a full build pipeline invocation."""

    apk: ApkArtifact
    run: WorkflowRun
    commit_sha: str | None = Field(
        default=None,
        description="Commit that published the source archive (if reported).",
    )
