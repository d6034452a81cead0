"""
Tests for the record loader
"""

import pyarrow as pa
import pyarrow.parquet as pq
import pytest
import shapely
from shapely.geometry import Point, box

from stquery.core.exceptions import ValidationError
from stquery.core.stobject import Interval
from stquery.io import read_records


@pytest.fixture
def sensors_csv(tmp_path):
    path = tmp_path / "sensors.csv"
    path.write_text(
        "id,name,wkt,t0,t1\n"
        '1,north gate,POINT (1 2),10,20\n'
        '2,south gate,"POLYGON ((0 0, 4 0, 4 4, 0 4, 0 0))",15,\n'
    )
    return path


class TestReadRecords:
    """Test CSV and Parquet loading"""

    def test_csv(self, sensors_csv):
        records = read_records(sensors_csv, start_column="t0", end_column="t1")

        assert len(records) == 2
        assert records[0].key.geometry.equals(Point(1, 2))
        assert records[0].key.time == Interval(10, 20)
        assert records[0].value == {"id": 1, "name": "north gate"}
        assert records[1].key.geometry.equals(box(0, 0, 4, 4))
        assert records[1].key.time == Interval(15)

    def test_csv_without_time(self, sensors_csv):
        records = read_records(sensors_csv)
        assert records[0].key.time is None
        assert set(records[0].value) == {"id", "name", "t0", "t1"}

    def test_parquet_wkb(self, tmp_path):
        path = tmp_path / "points.parquet"
        geometries = [Point(0, 0), Point(3, 4)]
        table = pa.table(
            {
                "geometry": pa.array(shapely.to_wkb(geometries).tolist(), type=pa.binary()),
                "label": ["origin", "other"],
            }
        )
        pq.write_table(table, path)

        records = read_records(path, geometry_column="geometry")
        assert [r.value["label"] for r in records] == ["origin", "other"]
        assert records[1].key.geometry.equals(Point(3, 4))

    def test_geometry_only(self, tmp_path):
        path = tmp_path / "bare.csv"
        path.write_text("wkt\nPOINT (1 1)\n")
        assert read_records(path)[0].value == {}

    def test_missing_file(self, tmp_path):
        with pytest.raises(ValidationError, match="not found"):
            read_records(tmp_path / "nope.csv")

    def test_missing_column(self, sensors_csv):
        with pytest.raises(ValidationError, match="geom"):
            read_records(sensors_csv, geometry_column="geom")

    def test_invalid_geometry(self, tmp_path):
        path = tmp_path / "broken.csv"
        path.write_text("wkt\nPOINT (1\n")
        with pytest.raises(ValidationError, match="Invalid geometry"):
            read_records(path)
