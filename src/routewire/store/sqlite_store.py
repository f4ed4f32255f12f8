from __future__ import annotations

import sqlite3
import time
from pathlib import Path
from typing import Iterable, Optional

from routewire.config import Config
from routewire.domain.models import EndpointDescriptor

ROLES = ("consumer", "producer", "mixed")


def _now_ts() -> int:
    return int(time.time())


class RouteWireSQLiteStore:
    """Repo-local SQLite store.

    - Each analyze run replaces the whole endpoint snapshot.
    - `seq` keeps the discovery order of the reconciled inventory.
    - Paths are repo-relative, exactly as reconciled.
    """

    SCHEMA_VERSION = "1.0"

    def __init__(self, db_path: Path, repo_root: Path):
        self.db_path = db_path
        self.repo_root = repo_root.resolve()
        self.db_path.parent.mkdir(parents=True, exist_ok=True)
        self._init_db()

    @staticmethod
    def db_path_for_repo(repo_root: Path) -> Path:
        return repo_root / Config.DB_DIR / "endpoints.db"

    # ----------------------------
    # Connection / schema
    # ----------------------------

    def _connect(self) -> sqlite3.Connection:
        con = sqlite3.connect(str(self.db_path))
        con.row_factory = sqlite3.Row
        return con

    def _init_db(self) -> None:
        with self._connect() as con:
            con.execute("PRAGMA journal_mode=WAL;")

            con.execute(
                """
                CREATE TABLE IF NOT EXISTS meta (
                    key TEXT PRIMARY KEY,
                    value TEXT NOT NULL
                );
                """
            )
            con.execute(
                """
                CREATE TABLE IF NOT EXISTS endpoints (
                    seq INTEGER PRIMARY KEY,
                    file_name TEXT NOT NULL,
                    endpoint_instance TEXT,
                    endpoint_uri TEXT NOT NULL,
                    endpoint_component_name TEXT,
                    consumer_only INTEGER NOT NULL,
                    producer_only INTEGER NOT NULL,
                    updated_at INTEGER NOT NULL
                );
                """
            )
            con.execute("CREATE INDEX IF NOT EXISTS idx_endpoints_file ON endpoints(file_name);")
            con.execute(
                "CREATE INDEX IF NOT EXISTS idx_endpoints_component ON endpoints(endpoint_component_name);"
            )

            if self._get_meta(con, "schema_version") is None:
                self._set_meta(con, "schema_version", self.SCHEMA_VERSION)

    # ----------------------------
    # Endpoints
    # ----------------------------

    def replace_all_endpoints(self, endpoints: Iterable[EndpointDescriptor]) -> int:
        """Replace the stored inventory with `endpoints`, keeping their order.

        Returns number inserted.
        """
        ts = _now_ts()
        to_insert = [
            (
                seq,
                e.file_name,
                e.endpoint_instance,
                e.endpoint_uri,
                e.endpoint_component_name,
                int(e.consumer_only),
                int(e.producer_only),
                ts,
            )
            for seq, e in enumerate(endpoints)
        ]

        with self._connect() as con:
            con.execute("DELETE FROM endpoints")
            con.executemany(
                """
                INSERT INTO endpoints(
                    seq, file_name, endpoint_instance, endpoint_uri,
                    endpoint_component_name, consumer_only, producer_only, updated_at
                )
                VALUES(?,?,?,?,?,?,?,?)
                """,
                to_insert,
            )
            self._set_meta(con, "last_analyzed_at", str(ts))

        return len(to_insert)

    def list_endpoints(
        self,
        component: Optional[str] = None,
        uri_contains: Optional[str] = None,
        file_contains: Optional[str] = None,
        role: Optional[str] = None,
        limit: int = 200,
    ) -> list[EndpointDescriptor]:
        q = """
        SELECT file_name, endpoint_instance, endpoint_uri, endpoint_component_name,
               consumer_only, producer_only
        FROM endpoints
        """
        where: list[str] = []
        params: list[object] = []

        if component:
            where.append("endpoint_component_name = ?")
            params.append(component)
        if uri_contains:
            where.append("endpoint_uri LIKE ?")
            params.append(f"%{uri_contains}%")
        if file_contains:
            where.append("file_name LIKE ?")
            params.append(f"%{file_contains}%")
        if role:
            role = role.lower()
            if role not in ROLES:
                raise ValueError(f"role must be one of: {', '.join(ROLES)}")
            if role == "consumer":
                where.append("consumer_only = 1")
            elif role == "producer":
                where.append("producer_only = 1")
            else:
                where.append("consumer_only = 0 AND producer_only = 0")

        if where:
            q += " WHERE " + " AND ".join(where)

        q += " ORDER BY seq LIMIT ?"
        params.append(int(limit))

        with self._connect() as con:
            rows = con.execute(q, tuple(params)).fetchall()
        return [
            EndpointDescriptor(
                file_name=r["file_name"],
                endpoint_instance=r["endpoint_instance"],
                endpoint_uri=r["endpoint_uri"],
                endpoint_component_name=r["endpoint_component_name"],
                consumer_only=bool(r["consumer_only"]),
                producer_only=bool(r["producer_only"]),
            )
            for r in rows
        ]

    def last_analyzed_at(self) -> Optional[int]:
        with self._connect() as con:
            value = self._get_meta(con, "last_analyzed_at")
        return int(value) if value is not None else None

    # ----------------------------
    # internal helpers
    # ----------------------------

    def _get_meta(self, con: sqlite3.Connection, key: str) -> Optional[str]:
        row = con.execute("SELECT value FROM meta WHERE key=?", (key,)).fetchone()
        return row[0] if row else None

    def _set_meta(self, con: sqlite3.Connection, key: str, value: str) -> None:
        con.execute(
            """
            INSERT INTO meta(key, value) VALUES(?, ?)
            ON CONFLICT(key) DO UPDATE SET value=excluded.value
            """,
            (key, value),
        )
