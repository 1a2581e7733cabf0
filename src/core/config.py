"""Configuración del Core.

Centraliza variables de entorno (pydantic-settings) para que la API, la CLI y
el adaptador de GitHub lean los mismos valores.

El token y el puerto se aceptan también con sus nombres sin prefijo
(`GITHUB_TOKEN`, `PORT`), que son los que fijan los hostings habituales.
"""

from __future__ import annotations

import os
import sys
from pathlib import Path

from pydantic import AliasChoices, Field
from pydantic_settings import BaseSettings, SettingsConfigDict


def get_user_config_dir() -> Path:
    """Per-user configuration directory (cross-platform, no extra deps)."""

    if sys.platform.startswith("win"):
        base = Path(os.environ.get("APPDATA", str(Path.home())))
        return base / "droidbuilder"
    if sys.platform == "darwin":
        return Path.home() / "Library" / "Application Support" / "droidbuilder"

    xdg = os.environ.get("XDG_CONFIG_HOME")
    if xdg:
        return Path(xdg) / "droidbuilder"
    return Path.home() / ".config" / "droidbuilder"


def get_user_env_file() -> Path:
    return get_user_config_dir() / ".env"


def _parse_env_lines(text: str) -> dict[str, str]:
    data: dict[str, str] = {}
    for raw_line in text.splitlines():
        line = raw_line.strip()
        if not line or line.startswith("#"):
            continue
        if "=" not in line:
            continue
        key, value = line.split("=", 1)
        key = key.strip()
        value = value.strip().strip('"').strip("'")
        if key:
            data[key] = value
    return data


def write_user_env_vars(values: dict[str, str], *, env_path: Path | None = None) -> Path:
    """Escribe/actualiza variables en el .env global del usuario."""

    env_path = env_path or get_user_env_file()
    env_path.parent.mkdir(parents=True, exist_ok=True)

    existing: dict[str, str] = {}
    if env_path.exists():
        existing = _parse_env_lines(env_path.read_text(encoding="utf-8"))

    existing.update({k: v for k, v in values.items() if v is not None})

    lines = ["# DroidBuilder user config (.env)"]
    for key in sorted(existing.keys()):
        lines.append(f"{key}={existing[key]}")
    env_path.write_text("\n".join(lines) + "\n", encoding="utf-8")
    return env_path


class AppSettings(BaseSettings):
    """Configuración central de la aplicación.

    - Tipado + validación en el borde (env vars).
    - Un único contrato de configuración para API/CLI/adapters.
    """

    model_config = SettingsConfigDict(
        env_prefix="DROIDBUILDER_",
        extra="ignore",
        case_sensitive=False,
        populate_by_name=True,
        # Orden: proyecto primero (dev), luego config global de usuario.
        env_file=(".env", str(get_user_env_file())),
        env_file_encoding="utf-8",
    )

    github_token: str | None = Field(
        default=None,
        validation_alias=AliasChoices("GITHUB_TOKEN", "DROIDBUILDER_GITHUB_TOKEN"),
        description="Bearer token for the GitHub REST API.",
    )
    github_api_base: str = Field(
        default="https://api.github.com",
        min_length=8,
        description="Base URL of the GitHub REST API.",
    )
    github_owner: str = Field(
        default="superaceCZ",
        min_length=1,
        description="Owner of the repository that hosts the build workflow.",
    )
    github_repo: str = Field(
        default="android-apk-builder",
        min_length=1,
        description="Repository that hosts the build workflow.",
    )
    github_branch: str = Field(
        default="main",
        min_length=1,
        description="Branch the source archive is committed to and built from.",
    )
    workflow_file: str = Field(
        default="build-apk.yml",
        min_length=1,
        description="Workflow file name inside .github/workflows/.",
    )
    source_path: str = Field(
        default="AndroidProject.zip",
        min_length=1,
        description="Path of the uploaded archive inside the repository.",
    )
    commit_message: str = Field(
        default="DroidBuilder export",
        min_length=1,
        description="Commit message used when publishing the archive.",
    )
    artifact_name: str = Field(
        default="app-debug-apk",
        min_length=1,
        description="Name of the run artifact that carries the APK.",
    )
    apk_suffix: str = Field(
        default=".apk",
        min_length=1,
        description="Suffix of the entry extracted from the artifact zip.",
    )

    poll_max_attempts: int = Field(
        default=30,
        ge=1,
        description="Maximum number of workflow-run status checks.",
    )
    poll_delay_seconds: float = Field(
        default=5.0,
        ge=0,
        description="Fixed delay between status checks (seconds).",
    )
    run_clock_skew_seconds: float = Field(
        default=30.0,
        ge=0,
        description="Tolerance when discarding runs created before the dispatch.",
    )

    http_timeout_seconds: float | None = Field(
        default=None,
        gt=0,
        description="Per-request timeout for GitHub calls; unset means no timeout.",
    )
    user_agent: str = Field(
        default="droidbuilder-backend/0.1",
        min_length=1,
        description="User-Agent sent to GitHub.",
    )

    host: str = Field(
        default="0.0.0.0",
        description="Interface the HTTP server binds to.",
    )
    port: int = Field(
        default=4000,
        ge=1,
        le=65535,
        validation_alias=AliasChoices("PORT", "DROIDBUILDER_PORT"),
        description="Port the HTTP server listens on.",
    )
    log_level: str = Field(
        default="INFO",
        description="Root log level.",
    )

    @property
    def repo_api_url(self) -> str:
        return f"{self.github_api_base.rstrip('/')}/repos/{self.github_owner}/{self.github_repo}"
