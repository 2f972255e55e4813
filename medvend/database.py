"""
Database engine initialisation and the document store built on top of it.

Each record lives in a single ``documents`` table addressed by
(collection, key) with its fields kept in a JSON column, which gives the
portal the point-lookup / equality-query / create-or-overwrite interface it
needs without a schema per collection.
"""

import sys
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Any, Dict, List, Optional

from sqlalchemy import (
    JSON,
    Column,
    DateTime,
    MetaData,
    String,
    Table,
    create_engine,
    func,
    insert,
    select,
    text,
    update,
)
from sqlalchemy.exc import SQLAlchemyError

from medvend.config import get_env
from medvend.errors import NotFoundError, TransportError


metadata = MetaData()

documents = Table(
    "documents",
    metadata,
    Column("collection", String(64), primary_key=True),
    Column("key", String(128), primary_key=True),
    Column("data", JSON, nullable=False),
    Column("updated_at", DateTime(timezone=True), nullable=True),
)

_TIMESTAMP_TAG = "__timestamp__"


class _ServerTimestamp:
    def __repr__(self):
        return "SERVER_TIMESTAMP"


# Field value replaced with the database server's clock at write time.
SERVER_TIMESTAMP = _ServerTimestamp()


def init_engine():
    """Create a SQLAlchemy engine and verify the connection."""
    db_uri = get_env("DB_URI")
    engine = create_engine(db_uri, echo=False, future=True)
    try:
        with engine.connect() as conn:
            conn.execute(text("SELECT 1"))
    except Exception as e:
        print("ERROR: could not connect to DB:", e, file=sys.stderr)
        sys.exit(1)
    print("[init] Connected to DB.")
    return engine


# ── Field encoding ───────────────────────────────────────────────────

def _encode(data: Dict[str, Any]) -> Dict[str, Any]:
    out = {}
    for name, value in data.items():
        if isinstance(value, datetime):
            value = {_TIMESTAMP_TAG: value.isoformat()}
        out[name] = value
    return out


def _decode(data: Dict[str, Any]) -> Dict[str, Any]:
    out = {}
    for name, value in data.items():
        if isinstance(value, dict) and set(value) == {_TIMESTAMP_TAG}:
            value = datetime.fromisoformat(value[_TIMESTAMP_TAG])
        out[name] = value
    return out


def _server_now(conn) -> datetime:
    value = conn.execute(select(func.current_timestamp())).scalar()
    if isinstance(value, str):
        value = datetime.fromisoformat(value)
    if value.tzinfo is None:
        value = value.replace(tzinfo=timezone.utc)
    return value


def _resolve_sentinels(conn, data: Dict[str, Any]) -> Dict[str, Any]:
    if not any(v is SERVER_TIMESTAMP for v in data.values()):
        return dict(data)
    now = _server_now(conn)
    return {k: (now if v is SERVER_TIMESTAMP else v) for k, v in data.items()}


# ── Store ────────────────────────────────────────────────────────────

@dataclass
class DocumentSnapshot:
    """Result of a read: the record's key and its fields (None if absent)."""
    id: str
    data: Optional[Dict[str, Any]]

    @property
    def exists(self) -> bool:
        return self.data is not None

    def get(self, name: str, default: Any = None) -> Any:
        return (self.data or {}).get(name, default)


class DocumentStore:
    def __init__(self, engine):
        self.engine = engine

    def create_schema(self):
        metadata.create_all(self.engine)

    def get(self, collection: str, key: str) -> DocumentSnapshot:
        """Point lookup of one record by collection and key."""
        stmt = select(documents.c.data).where(
            documents.c.collection == collection,
            documents.c.key == key,
        )
        try:
            with self.engine.connect() as conn:
                row = conn.execute(stmt).mappings().first()
        except SQLAlchemyError as e:
            raise TransportError(str(e)) from e
        return DocumentSnapshot(key, _decode(row["data"]) if row else None)

    def query(self, collection: str, filters: Dict[str, str], limit: int = 1) -> List[DocumentSnapshot]:
        """Return up to *limit* records whose fields equal every value in *filters*."""
        stmt = select(documents.c.key, documents.c.data).where(
            documents.c.collection == collection
        )
        for name, value in filters.items():
            stmt = stmt.where(documents.c.data[name].as_string() == value)
        stmt = stmt.order_by(documents.c.key).limit(limit)
        try:
            with self.engine.connect() as conn:
                rows = conn.execute(stmt).mappings().all()
        except SQLAlchemyError as e:
            raise TransportError(str(e)) from e
        return [DocumentSnapshot(r["key"], _decode(r["data"])) for r in rows]

    def set(self, collection: str, key: str, data: Dict[str, Any]) -> None:
        """Create the record, or replace every field of an existing one."""
        try:
            with self.engine.begin() as conn:
                fields = _resolve_sentinels(conn, data)
                values = {"data": _encode(fields), "updated_at": _server_now(conn)}
                if self._exists(conn, collection, key):
                    conn.execute(
                        update(documents)
                        .where(documents.c.collection == collection, documents.c.key == key)
                        .values(**values)
                    )
                else:
                    conn.execute(insert(documents).values(collection=collection, key=key, **values))
        except SQLAlchemyError as e:
            raise TransportError(str(e)) from e

    def update(self, collection: str, key: str, data: Dict[str, Any]) -> None:
        """Replace the listed fields of an existing record and leave the rest."""
        try:
            with self.engine.begin() as conn:
                row = conn.execute(
                    select(documents.c.data).where(
                        documents.c.collection == collection,
                        documents.c.key == key,
                    )
                ).mappings().first()
                if row is None:
                    raise NotFoundError(f"No document to update: {collection}/{key}")
                merged = dict(row["data"])
                merged.update(_encode(_resolve_sentinels(conn, data)))
                conn.execute(
                    update(documents)
                    .where(documents.c.collection == collection, documents.c.key == key)
                    .values(data=merged, updated_at=_server_now(conn))
                )
        except SQLAlchemyError as e:
            raise TransportError(str(e)) from e

    def ping(self) -> bool:
        try:
            with self.engine.connect() as conn:
                conn.execute(text("SELECT 1"))
            return True
        except SQLAlchemyError:
            return False

    @staticmethod
    def _exists(conn, collection: str, key: str) -> bool:
        stmt = select(documents.c.key).where(
            documents.c.collection == collection,
            documents.c.key == key,
        )
        return conn.execute(stmt).first() is not None
