# services/api/adapters/sqlite/__init__.py
from __future__ import annotations

import json
import os
import sqlite3
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Any, Dict, List, Optional
from uuid import uuid4

from fastapi import HTTPException
from sqlalchemy import (
    Boolean,
    Column,
    DateTime,
    ForeignKey,
    Index,
    MetaData,
    String,
    Table,
    Text,
    UniqueConstraint,
    and_,
    create_engine,
    event,
    insert,
    literal_column,
    select,
    text,
    update,
)
from sqlalchemy.engine import Engine
from sqlalchemy.exc import IntegrityError

# ---- Engine (SQLite) with WAL & pragmas -------------------------------------

def _ensure_dir(path: str):
    d = os.path.dirname(path)
    if d and not os.path.isdir(d):
        os.makedirs(d, exist_ok=True)


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


def make_engine(db_url: str) -> Engine:
    # Create data dir if sqlite file
    if db_url.startswith("sqlite:///"):
        file_path = db_url.replace("sqlite:///", "", 1)
        _ensure_dir(file_path)

    engine = create_engine(db_url, future=True, pool_pre_ping=True)

    # Apply pragmas per-connection
    @event.listens_for(engine, "connect")
    def _set_sqlite_pragma(dbapi_connection, connection_record):  # type: ignore
        if isinstance(dbapi_connection, sqlite3.Connection):
            cursor = dbapi_connection.cursor()
            cursor.execute("PRAGMA journal_mode=WAL;")
            cursor.execute("PRAGMA synchronous=NORMAL;")
            cursor.execute("PRAGMA foreign_keys=ON;")
            cursor.close()

    return engine

# ---- Schema via SQLAlchemy Core ---------------------------------------------

metadata = MetaData()

versions = Table(
    "versions",
    metadata,
    Column("version_id", String, primary_key=True),
    Column("project_id", String, nullable=False),
    Column("version", String, nullable=False),
    Column("title", String, nullable=False, default=""),
    Column("description", Text),
    Column("is_published", Boolean, nullable=False, default=False),
    Column("published_at", DateTime(timezone=True)),
    Column("created_by", String),
    Column("created_at", DateTime(timezone=True), nullable=False, default=_utcnow),
    UniqueConstraint("project_id", "version", name="uq_versions_project_version"),
)

version_pages = Table(
    "version_pages",
    metadata,
    Column("version_id", String, ForeignKey("versions.version_id", ondelete="CASCADE"), primary_key=True),
    Column("project_id", String, nullable=False),
    Column("content", Text, nullable=False),  # page JSON, stored as-is
    Column("updated_at", DateTime(timezone=True), nullable=False, default=_utcnow),
)

Index("idx_versions_project", versions.c.project_id)


def _iso(value: Optional[datetime]) -> Optional[str]:
    return value.isoformat() if value else None


def _version_dict(row) -> Dict[str, Any]:
    d = dict(row)
    d["is_published"] = bool(d.get("is_published"))
    d["published_at"] = _iso(d.get("published_at"))
    d["created_at"] = _iso(d.get("created_at"))
    return d

# ---- Adapter implementation --------------------------------------------------

@dataclass(frozen=True)
class SqliteAdapter:
    engine: Engine

    @classmethod
    def from_url(cls, db_url: str = "sqlite:///data/devlog.db") -> "SqliteAdapter":
        eng = make_engine(db_url)
        metadata.create_all(eng)
        return cls(engine=eng)

    # Versions
    def create_version(
        self,
        project_id: str,
        version: str,
        title: str,
        description: Optional[str] = None,
        created_by: Optional[str] = None,
    ) -> str:
        version_id = str(uuid4())
        try:
            with self.engine.begin() as conn:
                conn.execute(
                    insert(versions).values(
                        version_id=version_id,
                        project_id=project_id,
                        version=version,
                        title=title,
                        description=description,
                        is_published=False,
                        created_by=created_by or None,
                        created_at=_utcnow(),
                    )
                )
        except IntegrityError as e:
            raise HTTPException(
                status_code=409,
                detail=f"Version {version} already exists for project {project_id}",
            ) from e
        return version_id

    def list_versions(self, project_id: str) -> List[Dict[str, Any]]:
        with self.engine.begin() as conn:
            q = (
                select(versions)
                .where(versions.c.project_id == project_id)
                .order_by(versions.c.created_at.desc(), literal_column("rowid").desc())
            )
            return [_version_dict(r) for r in conn.execute(q).mappings().all()]

    def get_version(self, project_id: str, version_id: str) -> Optional[Dict[str, Any]]:
        with self.engine.begin() as conn:
            row = conn.execute(
                select(versions).where(
                    and_(versions.c.project_id == project_id, versions.c.version_id == version_id)
                )
            ).mappings().first()
            return _version_dict(row) if row else None

    def publish_version(self, project_id: str, version_id: str) -> Dict[str, Any]:
        with self.engine.begin() as conn:
            res = conn.execute(
                update(versions)
                .where(and_(versions.c.project_id == project_id, versions.c.version_id == version_id))
                .values(is_published=True, published_at=_utcnow())
            )
            if res.rowcount == 0:
                raise HTTPException(status_code=404, detail=f"Version {version_id} not found")
        return self.get_version(project_id, version_id)  # type: ignore[return-value]

    # Pages (upsert, last write wins)
    def get_page(self, project_id: str, version_id: str) -> Optional[Dict[str, Any]]:
        with self.engine.begin() as conn:
            row = conn.execute(
                select(version_pages).where(
                    and_(
                        version_pages.c.project_id == project_id,
                        version_pages.c.version_id == version_id,
                    )
                )
            ).mappings().first()
        if not row:
            return None
        return {
            "version_id": row["version_id"],
            "project_id": row["project_id"],
            "content": json.loads(row["content"]),
            "updated_at": _iso(row["updated_at"]),
        }

    def save_page(self, project_id: str, version_id: str, content: Dict[str, Any]) -> Dict[str, Any]:
        payload = json.dumps(content, ensure_ascii=False)
        now = _utcnow()
        with self.engine.begin() as conn:
            exists = conn.execute(
                select(versions.c.version_id).where(
                    and_(versions.c.project_id == project_id, versions.c.version_id == version_id)
                )
            ).first()
            if not exists:
                raise HTTPException(status_code=404, detail=f"Version {version_id} not found")

            res = conn.execute(
                update(version_pages)
                .where(version_pages.c.version_id == version_id)
                .values(content=payload, updated_at=now)
            )
            if res.rowcount == 0:
                conn.execute(
                    insert(version_pages).values(
                        version_id=version_id,
                        project_id=project_id,
                        content=payload,
                        updated_at=now,
                    )
                )
        return {
            "version_id": version_id,
            "project_id": project_id,
            "content": content,
            "updated_at": now.isoformat(),
        }

    def ping(self) -> None:
        with self.engine.connect() as conn:
            conn.execute(text("SELECT 1"))
