# src/agent_architect/artifacts/sqlite_repo.py

from __future__ import annotations

import contextlib
import json
import logging
import sqlite3
from pathlib import Path

from ..plans.models import Artifact, File

logger = logging.getLogger(__name__)


class SQLiteArtifactRepo:
    """
    SQLite artifact persistence.

    The schema is intentionally simple:
    - one row per artifact, files stored as a JSON array
    - `seq` (AUTOINCREMENT) records insertion order, which is the replay order

    Thread-safety:
    - each method opens its own SQLite connection
    """

    def __init__(self, db_path: str | Path = "artifacts.sqlite3") -> None:
        self._db_path = Path(db_path)
        self._db_path.parent.mkdir(parents=True, exist_ok=True)
        self._ensure_schema()
        try:
            total = self.count_artifacts()
        except Exception:
            total = -1
        logger.info("SQLiteArtifactRepo ready db=%s total=%s", self._db_path, total)

    # ---- low-level helpers ----

    def _get_conn(self) -> sqlite3.Connection:
        conn = sqlite3.connect(str(self._db_path), timeout=30.0)
        conn.row_factory = sqlite3.Row
        self._configure_conn(conn)
        return conn

    @staticmethod
    def _configure_conn(conn: sqlite3.Connection) -> None:
        with contextlib.suppress(Exception):
            conn.execute("PRAGMA journal_mode=WAL")

    def _ensure_schema(self) -> None:
        conn = self._get_conn()
        try:
            conn.execute(
                """
                CREATE TABLE IF NOT EXISTS artifacts (
                    seq INTEGER PRIMARY KEY AUTOINCREMENT,
                    id TEXT NOT NULL UNIQUE,
                    task_id TEXT NOT NULL,
                    created_at REAL NOT NULL,
                    files TEXT NOT NULL DEFAULT '[]'
                )
                """
            )
            conn.commit()
        finally:
            conn.close()

    @staticmethod
    def _files_to_str(files: tuple[File, ...]) -> str:
        return json.dumps([f.to_dict() for f in files], ensure_ascii=False)

    @staticmethod
    def _str_to_files(s: str | None) -> tuple[File, ...]:
        if not s:
            return ()
        try:
            val = json.loads(s)
        except json.JSONDecodeError:
            logger.warning("Corrupt files JSON in artifacts table; treating as empty.")
            return ()
        if not isinstance(val, list):
            return ()
        out: list[File] = []
        for item in val:
            if not isinstance(item, dict):
                continue
            try:
                out.append(File.from_dict(item))
            except ValueError:
                continue
        return tuple(out)

    def _row_to_artifact(self, row: sqlite3.Row) -> Artifact:
        return Artifact(
            id=str(row["id"]),
            task_id=str(row["task_id"] or ""),
            files=self._str_to_files(row["files"]),
            created_at=float(row["created_at"] or 0.0),
        )

    # ---- public API ----

    def count_artifacts(self) -> int:
        conn = self._get_conn()
        try:
            (n,) = conn.execute("SELECT COUNT(*) FROM artifacts").fetchone()
            return int(n)
        finally:
            conn.close()

    def save_artifact(self, artifact: Artifact) -> None:
        conn = self._get_conn()
        try:
            conn.execute(
                "INSERT INTO artifacts(id, task_id, created_at, files) VALUES (?, ?, ?, ?)",
                (
                    artifact.id,
                    artifact.task_id,
                    float(artifact.created_at),
                    self._files_to_str(artifact.files),
                ),
            )
            conn.commit()
            logger.debug("Artifact saved id=%s task=%s", artifact.id, artifact.task_id)
        finally:
            conn.close()

    def get_all_artifacts(self) -> list[Artifact]:
        """All artifacts in original creation (insertion) order."""
        conn = self._get_conn()
        try:
            rows = conn.execute("SELECT * FROM artifacts ORDER BY seq ASC").fetchall()
            return [self._row_to_artifact(r) for r in rows]
        finally:
            conn.close()

    def clear_artifacts(self) -> None:
        conn = self._get_conn()
        try:
            conn.execute("DELETE FROM artifacts")
            conn.commit()
        finally:
            conn.close()
