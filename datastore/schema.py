"""Table definition for persisted measurements.

The snapshot columns are derived from :class:`app.schemas.SensorSnapshot`, so
a new snapshot field becomes a new nullable column without touching this
module. Existing databases pick the column up through
:func:`ensure_schema`.
"""

from __future__ import annotations

from typing import Any, Dict, Type, get_args

from sqlalchemy import (
    Column,
    DateTime,
    Float,
    Index,
    Integer,
    MetaData,
    String,
    Table,
    inspect,
    text,
)
from sqlalchemy.engine import Connection
from sqlalchemy.types import TypeEngine

from app.schemas import SensorSnapshot

_SQL_TYPES: Dict[type, Type[TypeEngine[Any]]] = {
    str: String,
    int: Integer,
    float: Float,
}

SNAPSHOT_FIELDS: tuple[str, ...] = tuple(SensorSnapshot.model_fields)

# Attribute names that differ from the stored column name.
_COLUMN_NAMES: Dict[str, str] = {"device_datetime": "datetime"}

metadata = MetaData()


def _column_type(annotation: Any) -> TypeEngine[Any]:
    candidates = [arg for arg in get_args(annotation) if arg is not type(None)]
    python_type = candidates[0] if candidates else annotation
    try:
        return _SQL_TYPES[python_type]()
    except KeyError as exc:
        raise TypeError(f"No column type for snapshot annotation {annotation!r}") from exc


def _snapshot_columns() -> list[Column[Any]]:
    return [
        Column(
            _COLUMN_NAMES.get(name, name),
            _column_type(field.annotation),
            key=name,
            nullable=True,
        )
        for name, field in SensorSnapshot.model_fields.items()
    ]


measurements = Table(
    "measurements",
    metadata,
    Column("id", Integer, primary_key=True, autoincrement=True),
    Column("timestamp", DateTime, nullable=False),
    *_snapshot_columns(),
    Index("idx_measurements_timestamp", "timestamp"),
    Index("idx_measurements_sensor_id", "sensor_id"),
    sqlite_autoincrement=True,
)


def ensure_schema(connection: Connection) -> list[str]:
    """Create the table and indexes if needed and add any missing columns.

    Returns the names of columns added to a pre-existing table.
    """
    metadata.create_all(connection, checkfirst=True)

    existing = {column["name"] for column in inspect(connection).get_columns(measurements.name)}
    added: list[str] = []
    for column in measurements.columns:
        if column.name in existing:
            continue
        column_type = column.type.compile(dialect=connection.dialect)
        connection.execute(
            text(f'ALTER TABLE {measurements.name} ADD COLUMN "{column.name}" {column_type}')
        )
        added.append(column.name)

    # create_all skips indexes when the table already existed.
    for index in measurements.indexes:
        index.create(connection, checkfirst=True)

    return added
