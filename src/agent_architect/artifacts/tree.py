# src/agent_architect/artifacts/tree.py

"""
File-tree views over the artifact history.

Grouped view: one independent tree per artifact, labelled by task.
Combined view: path-keyed last-write-wins merge across all artifacts in
creation order, rendered with the same tree builder.
"""

from __future__ import annotations

from collections.abc import Iterable, Sequence
from dataclasses import dataclass, field

from ..plans.models import Artifact


@dataclass(slots=True, frozen=True)
class FileVersion:
    path: str
    content: str
    artifact_id: str
    task_id: str


@dataclass(slots=True)
class FileNode:
    name: str
    path: str
    content: str
    artifact_id: str


@dataclass(slots=True)
class DirNode:
    name: str
    children: dict[str, DirNode | FileNode] = field(default_factory=dict)

    def sorted_children(self) -> list[DirNode | FileNode]:
        """Directories before files; names compared case-sensitively."""
        return sorted(
            self.children.values(),
            key=lambda n: (0 if isinstance(n, DirNode) else 1, n.name),
        )

    def find(self, path: str) -> DirNode | FileNode | None:
        node: DirNode | FileNode = self
        for part in split_path(path):
            if not isinstance(node, DirNode):
                return None
            nxt = node.children.get(part)
            if nxt is None:
                return None
            node = nxt
        return node


@dataclass(slots=True, frozen=True)
class ArtifactGroup:
    artifact_id: str
    task_id: str
    root: DirNode

    @property
    def label(self) -> str:
        return f"Task: {self.task_id}"


def split_path(path: str) -> list[str]:
    return [p for p in path.split("/") if p]


def build_file_tree(files: Iterable[FileVersion], *, root_name: str = "") -> DirNode:
    """
    Every segment but the last becomes a directory; the last becomes a file leaf.

    Inserts are applied in order: a later entry replaces whatever node sits at
    the same name on the same level.
    """
    root = DirNode(name=root_name)
    for fv in files:
        parts = split_path(fv.path)
        if not parts:
            continue
        level = root
        for part in parts[:-1]:
            child = level.children.get(part)
            if not isinstance(child, DirNode):
                child = DirNode(name=part)
                level.children[part] = child
            level = child
        leaf = parts[-1]
        level.children[leaf] = FileNode(
            name=leaf,
            path=fv.path,
            content=fv.content,
            artifact_id=fv.artifact_id,
        )
    return root


def _versions(artifact: Artifact) -> list[FileVersion]:
    return [
        FileVersion(path=f.path, content=f.content, artifact_id=artifact.id, task_id=artifact.task_id)
        for f in artifact.files
    ]


def grouped_view(artifacts: Sequence[Artifact]) -> list[ArtifactGroup]:
    """One tree per artifact, in creation order; never merges across artifacts."""
    return [
        ArtifactGroup(
            artifact_id=a.id,
            task_id=a.task_id,
            root=build_file_tree(_versions(a), root_name=a.task_id),
        )
        for a in artifacts
    ]


def latest_files(artifacts: Sequence[Artifact]) -> dict[str, FileVersion]:
    """Path -> winning version. Later artifacts overwrite earlier ones."""
    merged: dict[str, FileVersion] = {}
    for a in artifacts:
        for fv in _versions(a):
            merged[fv.path] = fv
    return merged


def combined_view(artifacts: Sequence[Artifact]) -> DirNode:
    return build_file_tree(latest_files(artifacts).values())


def file_history(artifacts: Sequence[Artifact], path: str) -> list[FileVersion]:
    """Every version of `path`, oldest first."""
    return [fv for a in artifacts for fv in _versions(a) if fv.path == path]


def render_tree(node: DirNode, *, indent: str = "  ") -> str:
    lines: list[str] = []

    def walk(d: DirNode, depth: int) -> None:
        for child in d.sorted_children():
            if isinstance(child, DirNode):
                lines.append(f"{indent * depth}{child.name}/")
                walk(child, depth + 1)
            else:
                lines.append(f"{indent * depth}{child.name}")

    walk(node, 0)
    return "\n".join(lines)
