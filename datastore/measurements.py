"""SQLite-backed, append-only store for sensor snapshots."""

from __future__ import annotations

import logging
from contextlib import contextmanager
from datetime import datetime, timedelta, timezone
from functools import lru_cache
from pathlib import Path
from threading import Lock
from typing import Any, Callable, Iterator, Optional, Union

from sqlalchemy import create_engine, event, func, insert, select
from sqlalchemy.engine import Connection, Engine
from sqlalchemy.exc import SQLAlchemyError

from app.schemas import MeasurementSummary, SensorSnapshot, WindowStatistics
from datastore.errors import QueryFailed, StorageUnavailable, StoreClosed, WriteFailed
from datastore.schema import SNAPSHOT_FIELDS, ensure_schema, measurements
from settings import get_settings

logger = logging.getLogger(__name__)

Clock = Callable[[], datetime]

_BUSY_TIMEOUT_SECONDS = 5.0

_c = measurements.c

_SUMMARY_COLUMNS = (
    _c.timestamp,
    _c.sensor_id,
    _c.current_temp_f.label("temperature"),
    _c.current_humidity.label("humidity"),
    _c.pressure,
    _c.gas_680,
    _c.pm25_aqi,
    _c.pm25_cf1,
    _c.pm100_cf1,
    _c.pm25_aqi_b,
    _c.pm25_cf1_b,
    _c.pm100_cf1_b,
    _c.mem.label("memory"),
    _c.rssi,
    _c.pa_latency,
)

_STATISTIC_COLUMNS = (
    func.count().label("count"),
    func.avg(_c.current_temp_f).label("avg_temp"),
    func.avg(_c.current_humidity).label("avg_humidity"),
    func.avg(_c.pressure).label("avg_pressure"),
    func.avg(_c.pm25_aqi).label("avg_pm25_aqi"),
    func.avg(_c.pm25_cf1).label("avg_pm25_cf1"),
    func.avg(_c.pm100_cf1).label("avg_pm100_cf1"),
    func.max(_c.pm25_aqi).label("max_pm25_aqi"),
    func.min(_c.pm25_aqi).label("min_pm25_aqi"),
    func.max(_c.current_temp_f).label("max_temp"),
    func.min(_c.current_temp_f).label("min_temp"),
)


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


def _as_utc(value: datetime) -> datetime:
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc)


def _to_storage(value: datetime) -> datetime:
    # SQLite DATETIME columns hold naive values; everything stored is UTC.
    return _as_utc(value).replace(tzinfo=None)


def _configure_sqlite(dbapi_connection: Any, _connection_record: Any) -> None:
    cursor = dbapi_connection.cursor()
    try:
        cursor.execute("PRAGMA journal_mode=WAL")
        cursor.execute("PRAGMA synchronous=NORMAL")
    finally:
        cursor.close()


class MeasurementStore:
    """Durable log of sensor snapshots with trailing-window queries.

    Writers are serialised by an in-process lock and each insert runs in its
    own transaction. Readers take no lock; WAL journaling lets them run
    alongside the writer while seeing only committed rows.
    """

    def __init__(self, engine: Engine, location: Path, clock: Optional[Clock] = None) -> None:
        self.location = location
        self._engine = engine
        self._clock: Clock = clock or utc_now
        self._lock = Lock()
        self._closed = False
        self._last_timestamp: Optional[datetime] = None

    @classmethod
    def open(
        cls,
        location: Union[str, Path],
        clock: Optional[Clock] = None,
    ) -> "MeasurementStore":
        """Open or create the database at ``location``.

        Safe to call against an initialised database; existing rows are kept and
        snapshot fields missing from an older table are added as columns.
        """
        path = Path(location)
        engine: Optional[Engine] = None
        try:
            path.parent.mkdir(parents=True, exist_ok=True)
            engine = create_engine(
                f"sqlite:///{path}",
                connect_args={"check_same_thread": False, "timeout": _BUSY_TIMEOUT_SECONDS},
            )
            event.listen(engine, "connect", _configure_sqlite)
            with engine.begin() as connection:
                added = ensure_schema(connection)
                latest = connection.execute(select(func.max(_c.timestamp))).scalar_one_or_none()
        except (OSError, SQLAlchemyError) as exc:
            if engine is not None:
                engine.dispose()
            raise StorageUnavailable(
                f"Cannot open measurement store at {str(path)!r}: {exc}"
            ) from exc

        if added:
            logger.info(
                "Added columns to measurements table: %s",
                ", ".join(added),
                extra={"database_path": str(path)},
            )
        logger.info("Measurement store opened", extra={"database_path": str(path)})

        store = cls(engine=engine, location=path, clock=clock)
        if latest is not None:
            store._last_timestamp = _as_utc(latest)
        return store

    @property
    def closed(self) -> bool:
        return self._closed

    def append(self, snapshot: SensorSnapshot) -> None:
        """Insert one row for ``snapshot`` stamped with the current ingestion time."""
        values = {name: getattr(snapshot, name) for name in SNAPSHOT_FIELDS}
        with self._lock:
            self._ensure_open()
            timestamp = self._next_timestamp()
            try:
                with self._engine.begin() as connection:
                    connection.execute(
                        insert(measurements).values(timestamp=_to_storage(timestamp), **values)
                    )
            except SQLAlchemyError as exc:
                raise WriteFailed(f"Failed to insert measurement: {exc}") from exc
            self._last_timestamp = timestamp

        logger.debug("Stored measurement", extra={"sensor_id": snapshot.sensor_id})

    def recent_measurements(self, window_hours: int) -> list[MeasurementSummary]:
        """Return charting summaries for the trailing window, oldest first.

        A non-positive window is degenerate and yields an empty list.
        """
        self._ensure_open()
        if window_hours <= 0:
            return []

        start, end = self._window_bounds(window_hours)
        query = (
            select(*_SUMMARY_COLUMNS)
            .where(_c.timestamp >= start, _c.timestamp <= end)
            .order_by(_c.timestamp.asc(), _c.id.asc())
        )
        try:
            with self._reader() as connection:
                rows = connection.execute(query).mappings().all()
        except SQLAlchemyError as exc:
            raise QueryFailed(f"Failed to query measurements: {exc}") from exc

        summaries = []
        for row in rows:
            payload = dict(row)
            payload["timestamp"] = _as_utc(row["timestamp"])
            summaries.append(MeasurementSummary.model_validate(payload))
        return summaries

    def window_stats(self, window_hours: int) -> WindowStatistics:
        """Count, averages and extremes over the trailing window.

        Averages only consider non-null values. Aggregates with no contributing
        rows are ``None``.
        """
        self._ensure_open()
        if window_hours <= 0:
            return WindowStatistics()

        start, end = self._window_bounds(window_hours)
        query = select(*_STATISTIC_COLUMNS).where(_c.timestamp >= start, _c.timestamp <= end)
        try:
            with self._reader() as connection:
                row = connection.execute(query).mappings().one()
        except SQLAlchemyError as exc:
            raise QueryFailed(f"Failed to get stats: {exc}") from exc

        return WindowStatistics.model_validate(dict(row))

    def close(self) -> None:
        """Release the engine. Later calls on this store raise ``StoreClosed``."""
        with self._lock:
            if self._closed:
                return
            self._closed = True
            self._engine.dispose()
        logger.info("Measurement store closed", extra={"database_path": str(self.location)})

    def __enter__(self) -> "MeasurementStore":
        return self

    def __exit__(self, *_exc_info: object) -> None:
        self.close()

    def _ensure_open(self) -> None:
        if self._closed:
            raise StoreClosed(f"Measurement store at {str(self.location)!r} is closed.")

    @contextmanager
    def _reader(self) -> Iterator[Connection]:
        try:
            with self._engine.connect() as connection:
                # close() may have run between the caller's check and connect().
                self._ensure_open()
                yield connection
        finally:
            if self._closed:
                self._engine.dispose()

    def _next_timestamp(self) -> datetime:
        now = _as_utc(self._clock())
        # Keep insertion order and timestamp order aligned if the clock steps back.
        if self._last_timestamp is not None and now < self._last_timestamp:
            return self._last_timestamp
        return now

    def _window_bounds(self, window_hours: int) -> tuple[datetime, datetime]:
        end = _to_storage(self._clock())
        try:
            start = end - timedelta(hours=window_hours)
        except OverflowError:
            # Reaches past the earliest representable time, so every row is in range.
            start = datetime.min
        return start, end


@lru_cache
def build_default_store(path: Optional[str] = None) -> MeasurementStore:
    """Open the store at the configured ``DATABASE_PATH``."""
    settings = get_settings()
    location = settings.database_path if path is None else path
    if not location:
        raise StorageUnavailable("No database path configured.")
    return MeasurementStore.open(location)
