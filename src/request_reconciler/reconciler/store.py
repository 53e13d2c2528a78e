"""Resource persistence layer.

A ``ResourceStore`` keeps the last written version of each resource, keyed
by name.  ``JsonFileResourceStore`` stores one ``resource_{name}.json`` file
per resource in a state directory.

Key design choices:

* **Atomic writes** -- ``save()`` writes to a temp file then calls
  ``os.replace()`` so readers never see partial data.
* **Whole-resource documents** -- spec and status are written together, so
  a stored file is a valid resource definition on its own.
"""

from __future__ import annotations

import json
import os
import re
import tempfile
from pathlib import Path
from typing import Protocol

from request_reconciler.models import Resource

_UNSAFE_CHARS = re.compile(r"[^A-Za-z0-9._-]")


class ResourceStore(Protocol):
    """Protocol that resource stores must satisfy."""

    def load(
        self, name: str, default: Resource | None = None
    ) -> Resource | None:
        """Return the stored resource called *name*, or *default*."""
        ...  # pragma: no cover

    def save(self, resource: Resource) -> None:
        """Persist *resource*, replacing any previous version."""
        ...  # pragma: no cover


class JsonFileResourceStore:
    """Store resources as JSON files in *state_dir*.

    Args:
        state_dir: Directory where resource files are kept.  Created on
            first save.
    """

    def __init__(self, state_dir: Path) -> None:
        self._state_dir = state_dir

    def load(
        self, name: str, default: Resource | None = None
    ) -> Resource | None:
        path = self._resource_path(name)
        if not path.exists():
            return default
        with open(path, encoding="utf-8") as fh:
            return Resource.model_validate(json.load(fh))

    def save(self, resource: Resource) -> None:
        """Persist *resource* atomically.

        Writes to a temporary file in the same directory then atomically
        replaces the target.
        """
        self._state_dir.mkdir(parents=True, exist_ok=True)

        target = self._resource_path(resource.name)
        fd, tmp_path = tempfile.mkstemp(
            dir=str(self._state_dir), suffix=".tmp"
        )
        try:
            with os.fdopen(fd, "w", encoding="utf-8") as fh:
                json.dump(resource.model_dump(mode="json"), fh, indent=2)
            os.replace(tmp_path, target)
        except BaseException:
            try:
                os.unlink(tmp_path)
            except OSError:
                pass
            raise

    def _resource_path(self, name: str) -> Path:
        return self._state_dir / f"resource_{_UNSAFE_CHARS.sub('_', name)}.json"
