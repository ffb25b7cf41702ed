from datetime import datetime, timezone

from services.indexer.src.indexer.utils.timestamps import iso_to_unix, unix_to_datetime


class TestIsoToUnix:

    def test_parses_zulu_suffix(self):
        assert iso_to_unix("2024-03-01T12:00:00Z") == 1709294400

    def test_parses_explicit_offset(self):
        assert iso_to_unix("2024-03-01T14:00:00+02:00") == 1709294400

    def test_naive_timestamps_are_utc(self):
        assert iso_to_unix("2024-03-01T12:00:00") == 1709294400


class TestUnixToDatetime:

    def test_returns_aware_utc(self):
        assert unix_to_datetime(1709294400) == datetime(2024, 3, 1, 12, tzinfo=timezone.utc)
