"""Durable record of the most recent successful generation."""

from __future__ import annotations

import json
import os
import tempfile
from pathlib import Path
from typing import Dict, Optional

from ..models import CIProvider, PersistedArtifact

_STORE_VERSION = 1

KEY_YAML = "generated_yaml"
KEY_PROVIDER = "provider"
KEY_PROJECT_NAME = "project_name"
KEY_SAVED_AT = "saved_at"


class ArtifactStore:
    """JSON key-value file rewritten atomically on every save."""

    def __init__(self, path: Path) -> None:
        self._path = path

    @property
    def path(self) -> Path:
        return self._path

    def save(self, artifact: PersistedArtifact) -> None:
        payload = {
            "version": _STORE_VERSION,
            KEY_YAML: artifact.yaml,
            KEY_PROVIDER: artifact.provider.value,
            KEY_PROJECT_NAME: artifact.project_name,
            KEY_SAVED_AT: artifact.saved_at,
        }
        self._path.parent.mkdir(parents=True, exist_ok=True)
        # Readers see either the previous record or the new one, never a mix.
        fd, tmp_name = tempfile.mkstemp(
            dir=self._path.parent, prefix=f".{self._path.name}.", suffix=".tmp"
        )
        try:
            with os.fdopen(fd, "w", encoding="utf-8") as handle:
                json.dump(payload, handle, indent=2, sort_keys=True)
            os.chmod(tmp_name, _default_file_mode())
            os.replace(tmp_name, self._path)
        except BaseException:
            Path(tmp_name).unlink(missing_ok=True)
            raise

    def load(self) -> Optional[PersistedArtifact]:
        try:
            data = json.loads(self._path.read_text(encoding="utf-8"))
        except FileNotFoundError:
            return None
        except (OSError, json.JSONDecodeError):
            return None
        return _artifact_from_dict(data)


def _default_file_mode() -> int:
    # mkstemp creates 0600 files; match what a plain open() would have produced.
    umask = os.umask(0)
    os.umask(umask)
    return 0o666 & ~umask


def _artifact_from_dict(data: object) -> Optional[PersistedArtifact]:
    if not isinstance(data, dict) or data.get("version") != _STORE_VERSION:
        return None
    fields: Dict[str, object] = {
        key: data.get(key) for key in (KEY_YAML, KEY_PROVIDER, KEY_PROJECT_NAME, KEY_SAVED_AT)
    }
    if not all(isinstance(value, str) for value in fields.values()):
        return None
    try:
        provider = CIProvider(fields[KEY_PROVIDER])
    except ValueError:
        return None
    return PersistedArtifact(
        yaml=str(fields[KEY_YAML]),
        provider=provider,
        project_name=str(fields[KEY_PROJECT_NAME]),
        saved_at=str(fields[KEY_SAVED_AT]),
    )


__all__ = ["ArtifactStore"]
