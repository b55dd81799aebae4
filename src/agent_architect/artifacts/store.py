# src/agent_architect/artifacts/store.py

from __future__ import annotations

import logging
import time
import uuid
from collections.abc import Iterable, Iterator

from ..core.errors import DuplicateArtifactError
from ..core.ports import ArtifactRepo
from ..plans.models import Artifact, File

logger = logging.getLogger(__name__)


class ArtifactStore:
    """
    Append-only, creation-ordered artifact history.

    The in-memory list is the source of truth for views and executor context;
    an optional ArtifactRepo mirrors it durably. `record()` and `clear()` are
    the only mutations.

    Ordering matters: the combined view's last-write-wins merge follows this
    list's order, so it is kept as a list (never a set/dict keyed by id).
    """

    def __init__(self, repo: ArtifactRepo | None = None) -> None:
        self._repo = repo
        self._artifacts: list[Artifact] = []
        self._ids: set[str] = set()

    def __len__(self) -> int:
        return len(self._artifacts)

    def __iter__(self) -> Iterator[Artifact]:
        return iter(self.snapshot())

    def snapshot(self) -> tuple[Artifact, ...]:
        """Immutable copy in creation order (used as executor context)."""
        return tuple(self._artifacts)

    def get(self, artifact_id: str) -> Artifact | None:
        for a in self._artifacts:
            if a.id == artifact_id:
                return a
        return None

    def next_timestamp(self) -> float:
        """Wall-clock time, bumped so it never goes below the newest artifact."""
        now = time.time()
        if self._artifacts and now <= self._artifacts[-1].created_at:
            now = self._artifacts[-1].created_at + 1e-6
        return now

    def create(self, task_id: str, files: Iterable[File]) -> Artifact:
        """Build and record a new artifact with a fresh id."""
        artifact = Artifact(
            id=uuid.uuid4().hex,
            task_id=task_id,
            files=tuple(files),
            created_at=self.next_timestamp(),
        )
        self.record(artifact)
        return artifact

    def record(self, artifact: Artifact) -> None:
        if artifact.id in self._ids:
            raise DuplicateArtifactError(f"artifact already recorded: {artifact.id}")

        # Persist first so a failed write never leaves memory ahead of disk.
        if self._repo is not None:
            self._repo.save_artifact(artifact)

        self._artifacts.append(artifact)
        self._ids.add(artifact.id)
        logger.info(
            "Artifact recorded id=%s task=%s files=%d",
            artifact.id,
            artifact.task_id,
            len(artifact.files),
        )

    def clear(self) -> None:
        if self._repo is not None:
            self._repo.clear_artifacts()
        n = len(self._artifacts)
        self._artifacts.clear()
        self._ids.clear()
        logger.info("Artifact store cleared (%d removed)", n)

    def load(self) -> int:
        """Replace the in-memory history with what the repo replays. Returns the count."""
        if self._repo is None:
            return len(self._artifacts)

        loaded = self._repo.get_all_artifacts()
        self._artifacts = list(loaded)
        self._ids = {a.id for a in loaded}
        logger.info("Loaded %d artifacts from repo", len(loaded))
        return len(loaded)
