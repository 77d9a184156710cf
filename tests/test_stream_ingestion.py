"""Tests for stream ingestion."""

from models.training import HrZones, PowerZones, SampleStream
from coaching.exceptions import TelemetryFetchError
from coaching.stream_ingestion import StreamIngestor
from tests.conftest import FakeActivityStore


class FakeTelemetry:
    """Returns canned streams; ids without a stream fail like a rate-limited source."""

    def __init__(self, streams):
        self.streams = streams
        self.fetched = []

    def get_activity_streams(self, activity_id):
        self.fetched.append(activity_id)
        if activity_id not in self.streams:
            raise TelemetryFetchError(activity_id, "429 Too Many Requests")
        return self.streams[activity_id]


def test_power_stream_gets_power_zones_only() -> None:
    streams = SampleStream(
        time=list(range(1200)),
        watts=[100] * 600 + [300] * 600,
        heartrate=[150] * 1200,
    )
    store = FakeActivityStore()

    synced = StreamIngestor(store, FakeTelemetry({"a1": streams})).ingest_streams(["a1"], 250, 170)

    assert synced == 1
    stored_streams, power_zones, hr_zones = store.stored_streams["a1"]
    assert stored_streams is streams
    assert isinstance(power_zones, PowerZones)
    assert (power_zones.z1, power_zones.z6) == (600, 600)
    assert hr_zones is None


def test_heart_rate_only_stream_gets_hr_zones() -> None:
    streams = SampleStream(time=[0, 1, 2], heartrate=[100, 150, 180])
    store = FakeActivityStore()

    StreamIngestor(store, FakeTelemetry({"a1": streams})).ingest_streams(["a1"], 250, 170)

    _, power_zones, hr_zones = store.stored_streams["a1"]
    assert power_zones is None
    assert isinstance(hr_zones, HrZones)
    assert hr_zones.as_dict() == {"z1": 1, "z2": 0, "z3": 1, "z4": 0, "z5": 1}


def test_stream_without_samples_is_stored_without_zones() -> None:
    store = FakeActivityStore()

    StreamIngestor(store, FakeTelemetry({"a1": SampleStream(time=[0, 1])})).ingest_streams(["a1"], 250, 170)

    assert store.stored_streams["a1"][1:] == (None, None)


def test_failed_fetch_is_skipped() -> None:
    streams = SampleStream(time=[0], watts=[200])
    store = FakeActivityStore()
    telemetry = FakeTelemetry({"a1": streams, "a3": streams})

    synced = StreamIngestor(store, telemetry).ingest_streams(["a1", "a2", "a3"], 250, 170)

    assert synced == 2
    assert telemetry.fetched == ["a1", "a2", "a3"]
    assert sorted(store.stored_streams) == ["a1", "a3"]


def test_batch_is_capped() -> None:
    streams = SampleStream(time=[0], watts=[200])
    telemetry = FakeTelemetry({f"a{i}": streams for i in range(5)})

    synced = StreamIngestor(FakeActivityStore(), telemetry).ingest_streams(
        [f"a{i}" for i in range(5)], 250, 170, max_activities=2
    )

    assert synced == 2
    assert telemetry.fetched == ["a0", "a1"]
