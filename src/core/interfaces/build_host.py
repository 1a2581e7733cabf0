"""Contrato del servicio remoto de build.

Protocol estructural: el pipeline del Core depende de estas operaciones, no
del cliente HTTP concreto, así que los tests pueden sustituirlo.
"""

from __future__ import annotations

from typing import Protocol, runtime_checkable

from core.domain.models import Artifact, RemoteFile, WorkflowRun


@runtime_checkable
class BuildHost(Protocol):
    """Operaciones mínimas sobre el repositorio y su automatización.

    - Todas son asíncronas porque hacen I/O (HTTP).
    - Cualquier respuesta no exitosa se traduce a `RemoteCallError`.
    """

    async def get_file(self, path: str, *, ref: str) -> RemoteFile:
        """Lee la versión actual de `path`; `sha` es None si no existe."""

        ...

    async def put_file(
        self,
        path: str,
        content: bytes,
        *,
        branch: str,
        message: str,
        sha: str | None = None,
    ) -> str | None:
        """Crea o actualiza `path` y devuelve el sha del commit (si viene)."""

        ...

    async def dispatch_workflow(self, workflow: str, *, ref: str) -> None:
        ...

    async def latest_run(self, workflow: str, *, branch: str) -> WorkflowRun | None:
        ...

    async def list_artifacts(self, run_id: int) -> list[Artifact]:
        ...

    async def download_artifact(self, artifact: Artifact) -> bytes:
        ...
