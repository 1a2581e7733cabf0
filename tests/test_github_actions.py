from __future__ import annotations

import asyncio
import base64

import pytest

from adapters.github_actions import GitHubActionsClient
from conftest import DOWNLOAD_URL, make_run
from core.domain.errors import RemoteCallError
from core.domain.models import Artifact


def _client(settings, fake_github) -> GitHubActionsClient:
    return GitHubActionsClient(settings, transport=fake_github.transport)


def test_get_file_returns_sha_of_existing_file(settings, fake_github):
    fake_github.existing_sha = "abc123"

    async def scenario():
        async with _client(settings, fake_github) as host:
            return await host.get_file(settings.source_path, ref="main")

    remote = asyncio.run(scenario())

    assert remote.exists
    assert remote.sha == "abc123"
    assert fake_github.requests[0].url.params["ref"] == "main"


def test_get_file_missing_file_has_no_sha(settings, fake_github):
    async def scenario():
        async with _client(settings, fake_github) as host:
            return await host.get_file(settings.source_path, ref="main")

    remote = asyncio.run(scenario())

    assert not remote.exists
    assert remote.path == settings.source_path


def test_get_file_other_errors_raise(settings, fake_github):
    fake_github.canned["read"] = (403, "forbidden")

    async def scenario():
        async with _client(settings, fake_github) as host:
            await host.get_file(settings.source_path, ref="main")

    with pytest.raises(RemoteCallError) as info:
        asyncio.run(scenario())
    assert info.value.status_code == 403


def test_put_file_sends_base64_content_and_sha(settings, fake_github):
    async def scenario():
        async with _client(settings, fake_github) as host:
            return await host.put_file(
                settings.source_path, b"zip-bytes", branch="main", message="DroidBuilder export", sha="abc123"
            )

    commit_sha = asyncio.run(scenario())

    request = fake_github.calls("write")[0]
    body = fake_github.json_body(request)
    assert commit_sha == "c0ffee"
    assert request.method == "PUT"
    assert base64.b64decode(body["content"]) == b"zip-bytes"
    assert body["branch"] == "main"
    assert body["message"] == "DroidBuilder export"
    assert body["sha"] == "abc123"
    assert request.headers["Authorization"] == "Bearer test-token"
    assert request.headers["Accept"] == "application/vnd.github+json"


def test_put_file_without_sha_omits_it(settings, fake_github):
    async def scenario():
        async with _client(settings, fake_github) as host:
            await host.put_file(settings.source_path, b"zip-bytes", branch="main", message="m")

    asyncio.run(scenario())

    assert "sha" not in fake_github.json_body(fake_github.calls("write")[0])


def test_put_file_failure_carries_status_and_body(settings, fake_github):
    fake_github.canned["write"] = (409, "sha does not match")

    async def scenario():
        async with _client(settings, fake_github) as host:
            await host.put_file(settings.source_path, b"x", branch="main", message="m")

    with pytest.raises(RemoteCallError, match=r"GitHub upload failed \(409\): sha does not match"):
        asyncio.run(scenario())


def test_dispatch_posts_branch_ref(settings, fake_github):
    async def scenario():
        async with _client(settings, fake_github) as host:
            await host.dispatch_workflow(settings.workflow_file, ref="main")

    asyncio.run(scenario())

    assert fake_github.json_body(fake_github.calls("dispatch")[0]) == {"ref": "main"}


def test_latest_run_requests_single_run_on_branch(settings, fake_github):
    fake_github.runs = [make_run(run_id=99, status="in_progress", conclusion=None)]

    async def scenario():
        async with _client(settings, fake_github) as host:
            return await host.latest_run(settings.workflow_file, branch="main")

    run = asyncio.run(scenario())

    params = fake_github.calls("runs")[0].url.params
    assert params["branch"] == "main"
    assert params["per_page"] == "1"
    assert run is not None
    assert run.id == 99
    assert not run.is_completed


def test_latest_run_none_when_list_is_empty(settings, fake_github):
    fake_github.runs = [None]

    async def scenario():
        async with _client(settings, fake_github) as host:
            return await host.latest_run(settings.workflow_file, branch="main")

    assert asyncio.run(scenario()) is None


def test_list_and_download_artifacts(settings, fake_github):
    async def scenario():
        async with _client(settings, fake_github) as host:
            artifacts = await host.list_artifacts(7)
            data = await host.download_artifact(artifacts[0])
            return artifacts, data

    artifacts, data = asyncio.run(scenario())

    assert [a.name for a in artifacts] == ["app-debug-apk"]
    assert fake_github.calls("artifacts")[0].url.path.endswith("/actions/runs/7/artifacts")
    assert data == fake_github.bundle


def test_download_failure_raises(settings, fake_github):
    fake_github.canned["download"] = (410, "artifact expired")
    artifact = Artifact(id=42, name="app-debug-apk", archive_download_url=DOWNLOAD_URL)

    async def scenario():
        async with _client(settings, fake_github) as host:
            await host.download_artifact(artifact)

    with pytest.raises(RemoteCallError, match="410"):
        asyncio.run(scenario())


def test_non_object_run_listing_counts_as_no_run(settings, fake_github):
    fake_github.canned["runs"] = (200, "[]")

    async def scenario():
        async with _client(settings, fake_github) as host:
            return await host.latest_run(settings.workflow_file, branch="main")

    assert asyncio.run(scenario()) is None


def test_non_object_artifact_listing_is_empty(settings, fake_github):
    fake_github.canned["artifacts"] = (200, '["unexpected"]')

    async def scenario():
        async with _client(settings, fake_github) as host:
            return await host.list_artifacts(7)

    assert asyncio.run(scenario()) == []
