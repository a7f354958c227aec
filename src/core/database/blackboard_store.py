"""
SQLite-backed evidence store.

Implements the Blackboard contract from core.blackboard on top of the
``artifacts`` / ``attributes`` tables. Artifacts are written as soon as they
are created but stay invisible to readers until a post marks them.
"""
from __future__ import annotations

import sqlite3
from datetime import datetime, timezone
from typing import Iterable, List, Optional, Sequence

from core.blackboard import Artifact, Attribute, BlackboardError
from core.enums import ArtifactType, AttributeType
from core.logging import get_logger

LOGGER = get_logger("core.database.blackboard_store")


class SqliteBlackboard:
    """Blackboard persisted in a case database connection."""

    def __init__(self, conn: sqlite3.Connection) -> None:
        self.conn = conn

    def new_artifact(self, kind: ArtifactType, source_file_id: int) -> Artifact:
        kind = ArtifactType(kind)
        try:
            with self.conn:
                cur = self.conn.execute(
                    "INSERT INTO artifacts(kind, source_file_id, created_at_utc) VALUES (?, ?, ?)",
                    (kind.value, int(source_file_id), _utc_now()),
                )
        except sqlite3.Error as exc:
            raise BlackboardError(f"Failed to create {kind} artifact: {exc}") from exc
        return Artifact(id=int(cur.lastrowid), kind=kind, source_file_id=int(source_file_id))

    def add_attributes(self, artifact: Artifact, attributes: Iterable[Attribute]) -> None:
        attributes = list(attributes)
        rows = [_attribute_row(artifact.id, attribute) for attribute in attributes]
        try:
            with self.conn:
                self.conn.executemany(
                    """
                    INSERT INTO attributes(artifact_id, attr_type, value_text, value_int, source)
                    VALUES (?, ?, ?, ?, ?)
                    """,
                    rows,
                )
        except sqlite3.Error as exc:
            raise BlackboardError(f"Failed to add attributes to artifact {artifact.id}: {exc}") from exc
        artifact.attributes.extend(attributes)

    def post_artifacts(self, artifacts: Sequence[Artifact], module_name: str) -> None:
        if not artifacts:
            return
        ids = [artifact.id for artifact in artifacts]
        now = _utc_now()
        try:
            with self.conn:
                updated = self.conn.executemany(
                    "UPDATE artifacts SET posted = 1, module_name = ?, posted_at_utc = ? WHERE id = ?",
                    [(module_name, now, artifact_id) for artifact_id in ids],
                ).rowcount
                if updated != len(ids):
                    # Rolls the whole batch back via the context manager
                    raise BlackboardError(
                        f"Post for {module_name} matched {updated} of {len(ids)} artifacts"
                    )
        except sqlite3.Error as exc:
            raise BlackboardError(f"Failed to post {len(ids)} artifact(s) for {module_name}: {exc}") from exc
        LOGGER.debug("Posted %d artifact(s) for %s", len(ids), module_name)

    def get_artifacts(self, kinds: Optional[Iterable[ArtifactType]] = None) -> List[Artifact]:
        sql = "SELECT id, kind, source_file_id FROM artifacts WHERE posted = 1"
        params: list = []
        if kinds is not None:
            kind_values = [ArtifactType(k).value for k in kinds]
            if not kind_values:
                return []
            sql += f" AND kind IN ({', '.join('?' for _ in kind_values)})"
            params.extend(kind_values)
        sql += " ORDER BY id"

        artifacts: dict[int, Artifact] = {}
        for row in self.conn.execute(sql, params).fetchall():
            artifacts[row[0]] = Artifact(id=row[0], kind=ArtifactType(row[1]), source_file_id=row[2])
        if not artifacts:
            return []

        placeholders = ", ".join("?" for _ in artifacts)
        attr_rows = self.conn.execute(
            f"""
            SELECT artifact_id, attr_type, value_text, value_int, source
            FROM attributes WHERE artifact_id IN ({placeholders}) ORDER BY id
            """,
            list(artifacts),
        ).fetchall()
        for artifact_id, attr_type, value_text, value_int, source in attr_rows:
            value = value_int if value_int is not None else value_text
            artifacts[artifact_id].attributes.append(
                Attribute(type=AttributeType(attr_type), value=value, source=source)
            )
        return list(artifacts.values())


def _attribute_row(artifact_id: int, attribute: Attribute) -> tuple:
    value = attribute.value
    if isinstance(value, int) and not isinstance(value, bool):
        return (artifact_id, AttributeType(attribute.type).value, None, value, attribute.source)
    return (
        artifact_id,
        AttributeType(attribute.type).value,
        None if value is None else str(value),
        None,
        attribute.source,
    )


def _utc_now() -> str:
    return datetime.now(tz=timezone.utc).replace(microsecond=0).isoformat()
