from __future__ import annotations

from sqlalchemy import Float, Integer, String

from app.schemas import DeviceReading, SensorSnapshot
from datastore.schema import SNAPSHOT_FIELDS, measurements


def test_table_has_one_nullable_column_per_snapshot_field() -> None:
    column_keys = [column.key for column in measurements.columns]

    assert column_keys[:2] == ["id", "timestamp"]
    assert column_keys[2:] == list(SensorSnapshot.model_fields)
    assert list(SNAPSHOT_FIELDS) == column_keys[2:]
    assert all(measurements.c[name].nullable for name in SNAPSHOT_FIELDS)
    assert measurements.c.timestamp.nullable is False


def test_column_types_follow_snapshot_annotations() -> None:
    assert isinstance(measurements.c.sensor_id.type, String)
    assert isinstance(measurements.c.pm25_aqi.type, Integer)
    assert isinstance(measurements.c.uptime.type, Integer)
    assert isinstance(measurements.c.current_temp_f.type, Float)
    assert isinstance(measurements.c.pm25_cf1_b.type, Float)


def test_display_only_fields_are_not_persisted() -> None:
    extra_fields = set(DeviceReading.model_fields) - set(SensorSnapshot.model_fields)

    assert {"hardware_version", "p25aqic", "p_0_3_um", "pressure_680", "period", "device_index"} <= extra_fields
    assert not extra_fields & set(measurements.c.keys())


def test_indexes_cover_timestamp_and_sensor_id() -> None:
    indexed = {
        index.name: [column.name for column in index.columns] for index in measurements.indexes
    }

    assert indexed == {
        "idx_measurements_timestamp": ["timestamp"],
        "idx_measurements_sensor_id": ["sensor_id"],
    }


def test_device_datetime_is_stored_in_datetime_column() -> None:
    column = measurements.c.device_datetime

    assert column.name == "datetime"
    assert isinstance(column.type, String)
