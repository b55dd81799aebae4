# src/agent_architect/artifacts/export.py

from __future__ import annotations

import io
import logging
import os
import zipfile
from collections.abc import Sequence
from enum import StrEnum
from pathlib import Path

from ..plans.models import Artifact
from .tree import latest_files

logger = logging.getLogger(__name__)


class ViewMode(StrEnum):
    GROUPED = "grouped"
    COMBINED = "combined"


def group_folder_name(artifact: Artifact) -> str:
    return f"Task_{artifact.task_id}_{artifact.id[:4]}"


def build_zip(artifacts: Sequence[Artifact], mode: ViewMode) -> bytes:
    """
    grouped:  one folder per artifact, every file as recorded
    combined: one entry per distinct path, winning (latest) content
    """
    buffer = io.BytesIO()
    with zipfile.ZipFile(buffer, mode="w", compression=zipfile.ZIP_DEFLATED) as zf:
        if mode == ViewMode.GROUPED:
            for artifact in artifacts:
                folder = group_folder_name(artifact)
                for f in artifact.files:
                    zf.writestr(f"{folder}/{f.path}", f.content)
        else:
            merged = latest_files(artifacts)
            for path in sorted(merged):
                zf.writestr(path, merged[path].content)
    return buffer.getvalue()


def export_zip(artifacts: Sequence[Artifact], mode: ViewMode, dest: str | Path) -> Path:
    """Write the archive atomically (tmp + replace) and return its path."""
    dest = Path(dest)
    dest.parent.mkdir(parents=True, exist_ok=True)
    data = build_zip(artifacts, mode)

    tmp = dest.with_suffix(dest.suffix + ".tmp")
    tmp.write_bytes(data)
    os.replace(tmp, dest)
    logger.info("Exported %s archive: %s (%d bytes, %d artifacts)", mode.value, dest, len(data), len(artifacts))
    return dest


def export_grouped_zip(artifacts: Sequence[Artifact], dest: str | Path) -> Path:
    return export_zip(artifacts, ViewMode.GROUPED, dest)


def export_combined_zip(artifacts: Sequence[Artifact], dest: str | Path) -> Path:
    return export_zip(artifacts, ViewMode.COMBINED, dest)
