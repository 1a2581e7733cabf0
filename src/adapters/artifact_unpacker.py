"""Extracción del binario dentro del zip de un artefacto."""

from __future__ import annotations

import io
import logging
import zipfile

from core.domain.errors import ArtifactNotFoundError, BuildError
from core.domain.models import ApkArtifact

logger = logging.getLogger(__name__)


def extract_entry_by_suffix(bundle: bytes, suffix: str) -> ApkArtifact:
    """Devuelve la primera entrada (orden del zip) cuyo nombre acaba en `suffix`."""

    try:
        archive = zipfile.ZipFile(io.BytesIO(bundle))
    except zipfile.BadZipFile as exc:
        raise BuildError(f"Artifact bundle is not a valid zip archive: {exc}") from exc

    with archive:
        for info in archive.infolist():
            if info.is_dir() or not info.filename.endswith(suffix):
                continue
            logger.info("Found %s in artifact: %s", suffix, info.filename)
            return ApkArtifact(entry_name=info.filename, content=archive.read(info))

    raise ArtifactNotFoundError(f"No {suffix} file found inside artifact zip.")
