"""Wrapper de httpx.

Estandariza headers de autenticación, timeouts y redirecciones para todas las
llamadas a la API de GitHub. Acepta un `transport` para sustituir la red en
tests (`httpx.MockTransport`).
"""

from __future__ import annotations

import httpx

from core.config import AppSettings

GITHUB_ACCEPT = "application/vnd.github+json"
GITHUB_API_VERSION = "2022-11-28"


def github_headers(settings: AppSettings) -> dict[str, str]:
    headers: dict[str, str] = {
        "User-Agent": settings.user_agent,
        "Accept": GITHUB_ACCEPT,
        "X-GitHub-Api-Version": GITHUB_API_VERSION,
    }
    if settings.github_token:
        headers["Authorization"] = f"Bearer {settings.github_token}"
    return headers


def build_async_client(
    settings: AppSettings | None = None,
    *,
    extra_headers: dict[str, str] | None = None,
    transport: httpx.AsyncBaseTransport | None = None,
) -> httpx.AsyncClient:
    """Crea un `httpx.AsyncClient` listo para la API de GitHub.

    - Sin timeout por defecto: el único límite es el presupuesto de polling.
    - `follow_redirects` porque la descarga de artefactos responde con 302 a
      un blob storage (httpx descarta `Authorization` al cambiar de origen).
    """

    settings = settings or AppSettings()
    headers = github_headers(settings)
    if extra_headers:
        headers.update(extra_headers)
    return httpx.AsyncClient(
        timeout=httpx.Timeout(settings.http_timeout_seconds),
        follow_redirects=True,
        headers=headers,
        transport=transport,
    )
