"""
Unit tests for the time partitioned Zarr store.

Tests:
- Ring range arithmetic
- Writes spanning partitions
- skip_first / skip_last
- Overlapping runs replace older data
- Smoothing
- Quantization
"""

from datetime import datetime, timezone

import numpy as np
import pytest

from forecast_ingest.errors import StoreWriteFailure
from forecast_ingest.storage import RingTimeRange, TimeSeriesStore


@pytest.fixture
def small_store(tmp_path, storage_config):
    return TimeSeriesStore(tmp_path / 'store', n_locations=3, n_time_per_file=10, config=storage_config)


def series(n_locations, n_time, start=0.0):
    return (start + np.arange(n_locations * n_time, dtype=np.float32)).reshape(n_locations, n_time)


class TestRingTimeRange:
    """Tests for RingTimeRange"""

    def test_from_run(self):
        run = datetime(2024, 1, 1, 6, tzinfo=timezone.utc)

        ring = RingTimeRange.from_run(run, dt_seconds=3600, n_time=60)

        assert ring.start == int(run.timestamp()) // 3600
        assert ring.end == ring.start + 60
        assert len(ring) == 60

    def test_runs_one_hour_apart_shift_by_one_slot(self):
        a = RingTimeRange.from_run(datetime(2024, 1, 1, 6, tzinfo=timezone.utc), 3600, 60)
        b = RingTimeRange.from_run(datetime(2024, 1, 1, 7, tzinfo=timezone.utc), 3600, 60)

        assert b.start - a.start == 1


class TestUpdateFromTimeOriented:
    """Tests for update_from_time_oriented and read"""

    def test_write_and_read_across_partitions(self, small_store):
        ring = RingTimeRange(15, 37)
        data = series(3, len(ring))

        small_store.update_from_time_oriented('temp', data, ring, scale_factor=10)

        for index in (1, 2, 3):
            assert small_store.exists(small_store.partition_path('temp', index))
        assert not small_store.exists(small_store.partition_path('temp', 0))
        np.testing.assert_allclose(small_store.read('temp', ring), data, atol=0.05)

    def test_unwritten_slots_are_nan(self, small_store):
        small_store.update_from_time_oriented('temp', series(3, 5), RingTimeRange(12, 17))

        result = small_store.read('temp', RingTimeRange(8, 20))

        assert np.all(np.isnan(result[:, :4]))
        np.testing.assert_array_equal(result[:, 4:9], series(3, 5))
        assert np.all(np.isnan(result[:, 9:]))

    def test_skip_first_and_last(self, small_store):
        ring = RingTimeRange(0, 8)

        small_store.update_from_time_oriented('precip', series(3, 8), ring, skip_first=1, skip_last=2)

        result = small_store.read('precip', ring)
        assert np.all(np.isnan(result[:, 0]))
        np.testing.assert_array_equal(result[:, 1:6], series(3, 8)[:, 1:6])
        assert np.all(np.isnan(result[:, 6:]))

    def test_newer_run_replaces_overlap(self, small_store):
        small_store.update_from_time_oriented('temp', np.full((3, 6), 1, np.float32), RingTimeRange(0, 6))
        small_store.update_from_time_oriented('temp', np.full((3, 6), 2, np.float32), RingTimeRange(3, 9))

        result = small_store.read('temp', RingTimeRange(0, 9))

        np.testing.assert_array_equal(result[0], [1, 1, 1, 2, 2, 2, 2, 2, 2])

    def test_smoothing_blends_with_existing(self, small_store):
        small_store.update_from_time_oriented('temp', np.zeros((3, 6), np.float32), RingTimeRange(0, 6), scale_factor=100)
        small_store.update_from_time_oriented(
            'temp', np.full((3, 4), 3, np.float32), RingTimeRange(2, 6), smooth=2, scale_factor=100
        )

        result = small_store.read('temp', RingTimeRange(0, 6))

        np.testing.assert_allclose(result[0], [0, 0, 1, 2, 3, 3], atol=0.01)

    def test_smoothing_without_existing_data(self, small_store):
        small_store.update_from_time_oriented('temp', np.full((3, 4), 3, np.float32), RingTimeRange(0, 4), smooth=2)

        np.testing.assert_array_equal(small_store.read('temp', RingTimeRange(0, 4))[0], [3, 3, 3, 3])

    def test_quantization(self, small_store):
        data = np.array([[0.123, -4.56, 7.891]] * 3, dtype=np.float32)

        small_store.update_from_time_oriented('temp', data, RingTimeRange(0, 3), scale_factor=20)

        np.testing.assert_allclose(small_store.read('temp', RingTimeRange(0, 3)), np.round(data * 20) / 20, atol=1e-4)

    def test_values_outside_int16_are_clipped(self, small_store):
        data = np.full((3, 2), 5000, dtype=np.float32)

        small_store.update_from_time_oriented('pressure', data, RingTimeRange(0, 2), scale_factor=10)

        np.testing.assert_allclose(small_store.read('pressure', RingTimeRange(0, 2)), 3276.7, atol=1e-3)

    def test_read_location_subset(self, small_store):
        data = series(3, 4)
        small_store.update_from_time_oriented('temp', data, RingTimeRange(0, 4))

        result = small_store.read('temp', RingTimeRange(0, 4), locations=slice(1, 2))

        np.testing.assert_array_equal(result, data[1:2])

    def test_shape_mismatch(self, small_store):
        with pytest.raises(StoreWriteFailure, match='does not match'):
            small_store.update_from_time_oriented('temp', series(2, 4), RingTimeRange(0, 4))

    def test_nothing_to_write(self, small_store):
        small_store.update_from_time_oriented('temp', series(3, 2), RingTimeRange(0, 2), skip_first=1, skip_last=1)

        assert not small_store.exists(small_store.partition_path('temp', 0))


class TestStaticGrid:
    """Tests for write_static and read_static"""

    def test_roundtrip(self, small_store, tmp_path):
        data = np.array([[1.4, -999], [2500, 0]], dtype=np.float32)
        path = tmp_path / 'static' / 'HSURF.zarr'

        small_store.write_static(path, data, chunks=(20, 20))

        assert small_store.exists(path)
        np.testing.assert_array_equal(small_store.read_static(path), [[1, -999], [2500, 0]])

    def test_read_missing(self, small_store, tmp_path):
        with pytest.raises(FileNotFoundError):
            small_store.read_static(tmp_path / 'missing.zarr')
