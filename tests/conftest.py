"""Pytest configuration and shared fixtures."""

import json
from collections.abc import Callable, Sequence
from pathlib import Path
from typing import Any

import pytest

RecordFactory = Callable[..., dict[str, Any]]


def _start_block(protocol: str, duration: float) -> dict[str, Any]:
    return {
        "version": "iperf 3.16",
        "timestamp": {"time": "Mon, 15 Jan 2024 10:00:00 GMT", "timesecs": 1705312800},
        "test_start": {"protocol": protocol, "num_streams": 1, "duration": duration},
    }


@pytest.fixture
def project_root() -> Path:
    """Return the project root directory."""
    return Path(__file__).parent.parent


@pytest.fixture
def make_udp_record() -> RecordFactory:
    """Factory for UDP iperf3 records with intervals ending at the given times."""

    def factory(
        ends: Sequence[float] = tuple(range(1, 11)),
        duration: float = 10,
        *,
        base_bps: float = 1_000_000,
        jitter_ms: float | None = 0.5,
        end_sum: dict[str, Any] | None = None,
    ) -> dict[str, Any]:
        intervals = []
        for i, end in enumerate(ends):
            interval_sum: dict[str, Any] = {
                "start": end - 1,
                "end": end,
                "seconds": 1,
                "bits_per_second": base_bps + i * 1000,
                "packets": 86,
                "omitted": False,
            }
            if jitter_ms is not None:
                interval_sum["jitter_ms"] = jitter_ms + i / 100
            intervals.append({"streams": [{"socket": 5, "packets": 86}], "sum": interval_sum})

        if end_sum is None:
            end_sum = {
                "bits_per_second": 1_048_576.5,
                "jitter_ms": 0.123,
                "lost_packets": 3,
                "packets": 860,
                "bytes": 1_245_000,
                "lost_percent": 0.35,
            }
        return {
            "start": _start_block("UDP", duration),
            "intervals": intervals,
            "end": {"streams": [{"udp": dict(end_sum)}], "sum": end_sum},
        }

    return factory


@pytest.fixture
def make_tcp_record() -> RecordFactory:
    """Factory for TCP iperf3 records with intervals ending at the given times."""

    def factory(
        ends: Sequence[float] = tuple(range(1, 11)),
        duration: float = 10,
        *,
        base_bps: float = 940_000_000,
        rtt_us: int | None = 1500,
        retransmits: int | None = 1,
        sum_sent: dict[str, Any] | None = None,
        mean_rtt_us: int | None = 2345,
    ) -> dict[str, Any]:
        intervals = []
        for i, end in enumerate(ends):
            stream: dict[str, Any] = {"socket": 5, "snd_cwnd": 1_000_000}
            if rtt_us is not None:
                stream["rtt"] = rtt_us + i * 10
            interval_sum: dict[str, Any] = {
                "start": end - 1,
                "end": end,
                "seconds": 1,
                "bits_per_second": base_bps + i * 1000,
            }
            if retransmits is not None:
                interval_sum["retransmits"] = retransmits
            intervals.append({"streams": [stream], "sum": interval_sum})

        end: dict[str, Any] = {"streams": [{"sender": {"bytes": 1_175_000_000}}]}
        if mean_rtt_us is not None:
            end["streams"][0]["sender"]["mean_rtt"] = mean_rtt_us
        if sum_sent is None:
            sum_sent = {
                "bits_per_second": 940_123_456,
                "retransmits": 12,
                "bytes": 1_175_000_000,
            }
        if sum_sent:
            end["sum_sent"] = sum_sent
        end["sum_received"] = {"bits_per_second": 939_000_000, "bytes": 1_174_000_000}
        return {
            "start": _start_block("TCP", duration),
            "intervals": intervals,
            "end": end,
        }

    return factory


@pytest.fixture
def write_json(tmp_path: Path) -> Callable[[str, Any], Path]:
    """Write a JSON document into tmp_path and return its path."""

    def writer(name: str, data: Any) -> Path:
        path = tmp_path / name
        path.write_text(json.dumps(data), encoding="utf-8")
        return path

    return writer
