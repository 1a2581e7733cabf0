from __future__ import annotations

import io
import json
import zipfile
from typing import Any

import httpx
import pytest

from core.config import AppSettings

DOWNLOAD_URL = "https://pipelines.actions.example/artifacts/42/zip"


def make_zip(entries: dict[str, bytes]) -> bytes:
    buffer = io.BytesIO()
    with zipfile.ZipFile(buffer, "w") as archive:
        for name, data in entries.items():
            archive.writestr(name, data)
    return buffer.getvalue()


def make_run(run_id: int = 7, status: str = "completed", conclusion: str | None = "success", **extra: Any) -> dict:
    run = {
        "id": run_id,
        "status": status,
        "conclusion": conclusion,
        "html_url": f"https://github.com/superaceCZ/android-apk-builder/actions/runs/{run_id}",
        "head_branch": "main",
    }
    run.update(extra)
    return run


class FakeGitHub:
    """In-memory stand-in for the GitHub endpoints the pipeline touches."""

    def __init__(self, settings: AppSettings) -> None:
        self.settings = settings
        self.requests: list[httpx.Request] = []
        self.existing_sha: str | None = None
        self.runs: list[dict | None] = [make_run()]
        self.artifacts: list[dict] = [
            {
                "id": 42,
                "name": settings.artifact_name,
                "archive_download_url": DOWNLOAD_URL,
                "size_in_bytes": 128,
                "expired": False,
            }
        ]
        self.bundle = make_zip({"outputs/app-debug.apk": b"APK-BYTES"})
        self.canned: dict[str, tuple[int, str]] = {}
        self._runs_served = 0

    @property
    def transport(self) -> httpx.MockTransport:
        return httpx.MockTransport(self.handler)

    def calls(self, stage: str) -> list[httpx.Request]:
        return [r for r in self.requests if self._stage(r) == stage]

    def _stage(self, request: httpx.Request) -> str:
        path = request.url.path
        repo = f"/repos/{self.settings.github_owner}/{self.settings.github_repo}"
        if str(request.url) == DOWNLOAD_URL:
            return "download"
        if path == f"{repo}/contents/{self.settings.source_path}":
            return "read" if request.method == "GET" else "write"
        if path == f"{repo}/actions/workflows/{self.settings.workflow_file}/dispatches":
            return "dispatch"
        if path == f"{repo}/actions/workflows/{self.settings.workflow_file}/runs":
            return "runs"
        if path.startswith(f"{repo}/actions/runs/") and path.endswith("/artifacts"):
            return "artifacts"
        return "unknown"

    def handler(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        stage = self._stage(request)

        if stage in self.canned:
            status, body = self.canned[stage]
            return httpx.Response(status, text=body)

        if stage == "read":
            if self.existing_sha is None:
                return httpx.Response(404, json={"message": "Not Found"})
            return httpx.Response(200, json={"sha": self.existing_sha, "path": self.settings.source_path})
        if stage == "write":
            return httpx.Response(201, json={"commit": {"sha": "c0ffee"}})
        if stage == "dispatch":
            return httpx.Response(204)
        if stage == "runs":
            index = min(self._runs_served, len(self.runs) - 1)
            self._runs_served += 1
            run = self.runs[index]
            return httpx.Response(200, json={"total_count": int(run is not None), "workflow_runs": [run] if run else []})
        if stage == "artifacts":
            return httpx.Response(200, json={"total_count": len(self.artifacts), "artifacts": self.artifacts})
        if stage == "download":
            return httpx.Response(200, content=self.bundle)
        return httpx.Response(500, text=f"unexpected request {request.method} {request.url}")

    def json_body(self, request: httpx.Request) -> dict:
        return json.loads(request.content)


class RecordingSleep:
    def __init__(self) -> None:
        self.calls: list[float] = []

    async def __call__(self, seconds: float) -> None:
        self.calls.append(seconds)


@pytest.fixture
def settings() -> AppSettings:
    return AppSettings(
        _env_file=None,
        github_token="test-token",
        poll_max_attempts=5,
        poll_delay_seconds=2.5,
    )


@pytest.fixture
def fake_github(settings: AppSettings) -> FakeGitHub:
    return FakeGitHub(settings)


@pytest.fixture
def recording_sleep() -> RecordingSleep:
    return RecordingSleep()
