"""HTTP API: liveness check and the build endpoint.

`create_app` takes its collaborators as arguments (settings, transport,
sleep) so the same app can run against GitHub or a mocked transport.
"""

from __future__ import annotations

import asyncio
import logging
from typing import Any

import httpx
from fastapi import FastAPI, File, UploadFile
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse, Response

from adapters.github_actions import GitHubActionsClient
from core.config import AppSettings
from core.domain.errors import WorkflowFailedError
from core.services.build_pipeline import Sleep, build_apk

logger = logging.getLogger(__name__)

APK_MEDIA_TYPE = "application/vnd.android.package-archive"
APK_FILENAME = "app-debug.apk"


def _error(status_code: int, message: str, **extra: Any) -> JSONResponse:
    return JSONResponse(status_code=status_code, content={"error": message, **extra})


def create_app(
    settings: AppSettings | None = None,
    *,
    transport: httpx.AsyncBaseTransport | None = None,
    sleep: Sleep = asyncio.sleep,
) -> FastAPI:
    settings = settings or AppSettings()
    if not settings.github_token:
        logger.error("GITHUB_TOKEN env var not set.")

    app = FastAPI(title="DroidBuilder backend")
    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_methods=["*"],
        allow_headers=["*"],
    )

    @app.get("/api/ping")
    async def ping() -> dict[str, Any]:
        return {"ok": True, "message": "Backend is alive."}

    @app.post("/api/build-apk")
    async def build(file: UploadFile | str | None = File(default=None)) -> Response:
        # a plain form value under "file" counts as no upload
        if file is None or isinstance(file, str):
            return _error(400, "No file uploaded.")

        archive = await file.read()
        logger.info("Received ZIP: %s size: %d", file.filename, len(archive))

        try:
            async with GitHubActionsClient(settings, transport=transport) as host:
                result = await build_apk(host=host, settings=settings, archive=archive, sleep=sleep)
        except WorkflowFailedError as exc:
            logger.error("Workflow run %s finished with conclusion=%s", exc.run.id, exc.run.conclusion)
            return _error(
                500,
                str(exc),
                status=exc.run.status,
                conclusion=exc.run.conclusion,
                html_url=exc.run.html_url,
            )
        except Exception as exc:
            logger.exception("Error in /api/build-apk")
            return _error(500, str(exc) or "Unknown error")
        finally:
            await file.close()

        return Response(
            content=result.apk.content,
            media_type=APK_MEDIA_TYPE,
            headers={"Content-Disposition": f'attachment; filename="{APK_FILENAME}"'},
        )

    return app
