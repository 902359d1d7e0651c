"""Tests for collector data models and time helpers."""

import time

from conftest import DAY, NOW

from log_agent.collector.models import StreamConfig, StreamStatus
from log_agent.collector.timeutil import day_number, fetch_time_offset, format_time, same_day


class TestStreamStatus:
    def test_defaults(self) -> None:
        assert StreamStatus() == StreamStatus(fpos=0, st_ino=0, last_post_time=0, curr_suffix="")

    def test_to_dict(self) -> None:
        status = StreamStatus(fpos=1, st_ino=2, last_post_time=3, curr_suffix="s")
        assert status.to_dict() == {"curr_suffix": "s", "last_post_time": 3, "fpos": 1, "st_ino": 2}

    def test_from_dict_with_large_values(self) -> None:
        """Test that 64-bit offsets and inodes survive."""
        big = 2**62
        status = StreamStatus.from_dict({"fpos": big, "st_ino": big})
        assert status.fpos == big
        assert status.st_ino == big

    def test_from_dict_keeps_defaults_for_malformed_fields(self) -> None:
        """Test that wrong types fall back to the supplied defaults."""
        defaults = StreamStatus(fpos=5, st_ino=6, last_post_time=7, curr_suffix="d")
        status = StreamStatus.from_dict(
            {"fpos": "12", "st_ino": True, "last_post_time": 1.5, "curr_suffix": 20230301},
            defaults,
        )
        assert status == defaults

    def test_from_dict_missing_fields(self) -> None:
        status = StreamStatus.from_dict({"curr_suffix": "20230301"})
        assert status == StreamStatus(curr_suffix="20230301")

    def test_from_dict_clamps_negative_offset(self) -> None:
        assert StreamStatus.from_dict({"fpos": -10}).fpos == 0

    def test_stream_config_enabled_by_default(self) -> None:
        assert StreamConfig(name="alarm", url_path="/x").collect_enable


class TestTimeUtil:
    def test_same_day(self) -> None:
        assert same_day(NOW, NOW - 3600, 0)
        assert not same_day(NOW, NOW - DAY, 0)

    def test_epoch_is_a_different_day(self) -> None:
        assert not same_day(NOW, 0, 0)

    def test_offset_moves_boundary(self) -> None:
        # 2023-03-01 23:30 UTC is already March 2nd at UTC+1
        late = NOW + 11 * 3600 + 1800
        assert same_day(NOW, late, 0)
        assert not same_day(NOW, late, 3600)

    def test_day_number(self) -> None:
        assert day_number(DAY - 1, 0) == 0
        assert day_number(DAY, 0) == 1

    def test_format_time(self) -> None:
        assert format_time("%Y-%m-%d", NOW, 0) == "2023-03-01"
        assert format_time("%Y%m%d", NOW + 12 * 3600, 0) == "20230302"
        assert format_time("%Y%m%d", NOW + 12 * 3600, -3600) == "20230301"

    def test_fetch_time_offset_matches_localtime(self) -> None:
        assert fetch_time_offset() == time.localtime().tm_gmtoff
