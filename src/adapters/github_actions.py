"""Adaptador: GitHub REST API (contents + Actions).

Implementa `core.interfaces.BuildHost` sobre httpx. Es I/O puro: no decide
nada del pipeline, solo traduce llamadas y errores.
"""

from __future__ import annotations

import base64
import logging
from typing import Any
from urllib.parse import quote

import httpx

from adapters.http_client import build_async_client
from core.config import AppSettings
from core.domain.errors import RemoteCallError
from core.domain.models import Artifact, RemoteFile, WorkflowRun
from core.interfaces.build_host import BuildHost

logger = logging.getLogger(__name__)


def _raise_for_status(response: httpx.Response, action: str) -> None:
    if response.is_success:
        return
    raise RemoteCallError(action, response.status_code, response.text)


class GitHubActionsClient(BuildHost):
    """Cliente de la API de GitHub para un repositorio concreto.

    Usa un `httpx.AsyncClient` propio (cerrado en `aclose`/`async with`) salvo
    que se le pase uno ya construido.
    """

    def __init__(
        self,
        settings: AppSettings | None = None,
        *,
        client: httpx.AsyncClient | None = None,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        self._settings = settings or AppSettings()
        self._owns_client = client is None
        self._client = client or build_async_client(self._settings, transport=transport)

    async def __aenter__(self) -> "GitHubActionsClient":
        return self

    async def __aexit__(self, *exc_info: object) -> None:
        await self.aclose()

    async def aclose(self) -> None:
        if self._owns_client:
            await self._client.aclose()

    def _contents_url(self, path: str) -> str:
        return f"{self._settings.repo_api_url}/contents/{quote(path, safe='/')}"

    def _workflow_url(self, workflow: str) -> str:
        return f"{self._settings.repo_api_url}/actions/workflows/{quote(workflow, safe='')}"

    async def get_file(self, path: str, *, ref: str) -> RemoteFile:
        resp = await self._client.get(self._contents_url(path), params={"ref": ref})
        if resp.status_code == 404:
            return RemoteFile(path=path)
        _raise_for_status(resp, "Failed to read existing file")

        data = resp.json()
        sha = data.get("sha") if isinstance(data, dict) else None
        return RemoteFile(path=path, sha=sha if isinstance(sha, str) else None)

    async def put_file(
        self,
        path: str,
        content: bytes,
        *,
        branch: str,
        message: str,
        sha: str | None = None,
    ) -> str | None:
        body: dict[str, Any] = {
            "message": message,
            "content": base64.b64encode(content).decode("ascii"),
            "branch": branch,
        }
        if sha:
            body["sha"] = sha

        resp = await self._client.put(self._contents_url(path), json=body)
        _raise_for_status(resp, "GitHub upload failed")

        data = resp.json()
        commit = data.get("commit") if isinstance(data, dict) else None
        if isinstance(commit, dict) and isinstance(commit.get("sha"), str):
            return commit["sha"]
        return None

    async def dispatch_workflow(self, workflow: str, *, ref: str) -> None:
        resp = await self._client.post(
            f"{self._workflow_url(workflow)}/dispatches",
            json={"ref": ref},
        )
        _raise_for_status(resp, "Workflow dispatch failed")

    async def latest_run(self, workflow: str, *, branch: str) -> WorkflowRun | None:
        resp = await self._client.get(
            f"{self._workflow_url(workflow)}/runs",
            params={"branch": branch, "per_page": 1},
        )
        _raise_for_status(resp, "Failed to list workflow runs")

        data = resp.json()
        runs = data.get("workflow_runs") if isinstance(data, dict) else None
        if not runs:
            return None
        return WorkflowRun.model_validate(runs[0])

    async def list_artifacts(self, run_id: int) -> list[Artifact]:
        resp = await self._client.get(f"{self._settings.repo_api_url}/actions/runs/{run_id}/artifacts")
        _raise_for_status(resp, "Failed to list artifacts")

        data = resp.json()
        artifacts = data.get("artifacts") if isinstance(data, dict) else None
        return [Artifact.model_validate(a) for a in artifacts or []]

    async def download_artifact(self, artifact: Artifact) -> bytes:
        resp = await self._client.get(artifact.archive_download_url)
        _raise_for_status(resp, "Failed to download artifact zip")
        return resp.content
