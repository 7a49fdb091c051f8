import logging

import pytest

from lyrics_lab.utils.telemetry import StructuredTelemetry, TelemetryLogger


def test_structured_telemetry_emits_logging_events(caplog):
    telemetry = StructuredTelemetry()
    listener = TelemetryLogger()
    telemetry.add_listener(listener)

    caplog.set_level(logging.DEBUG, logger="lyrics_lab.utils.telemetry")

    telemetry.start_trace("test-trace")
    with telemetry.timer("phase"):
        pass
    telemetry.increment("songs.analysed")
    telemetry.annotate("result.total", 3)

    messages = [record.message for record in caplog.records]
    assert any("Telemetry trace_started: test-trace" in message for message in messages)
    assert any("Telemetry timing: phase" in message for message in messages)
    assert any("Telemetry counter: songs.analysed" in message for message in messages)
    assert any("Telemetry metadata: result.total" in message for message in messages)


def test_telemetry_logger_respects_level(caplog):
    telemetry = StructuredTelemetry(listeners=[TelemetryLogger()])
    caplog.set_level(logging.INFO, logger="lyrics_lab.utils.telemetry")

    telemetry.start_trace("quiet")

    assert caplog.records == []


def test_snapshot_aggregates_timings(fake_clock):
    telemetry = StructuredTelemetry(time_fn=fake_clock)
    telemetry.start_trace("trace")

    with telemetry.timer("step") as payload:
        payload["items"] = 2
    telemetry.record_timing("step", 0.05)
    telemetry.increment("hits")
    telemetry.increment("hits", 2)

    snapshot = telemetry.snapshot()
    assert snapshot["name"] == "trace"
    assert snapshot["timings"]["step"]["count"] == 2
    assert snapshot["timings"]["step"]["max"] == pytest.approx(0.05)
    assert snapshot["timings"]["step"]["min"] == pytest.approx(0.01)
    assert snapshot["counters"] == {"hits": 3.0}
    assert snapshot["events"][0]["metadata"] == {"items": 2}


def test_start_trace_resets_state():
    telemetry = StructuredTelemetry()
    first = telemetry.start_trace("one")
    telemetry.increment("hits")

    second = telemetry.start_trace("two")

    assert second == first + 1
    assert telemetry.snapshot()["counters"] == {}
    assert telemetry.snapshot()["metadata"]["trace_name"] == "two"


def test_failing_listener_does_not_interrupt_work():
    events = []

    def broken(event_type, payload):
        raise RuntimeError("listener failure")

    telemetry = StructuredTelemetry(listeners=[broken])
    telemetry.add_listener(lambda event_type, payload: events.append(event_type))

    telemetry.start_trace("trace")
    telemetry.remove_listener(broken)
    telemetry.increment("hits")

    assert events == ["trace_started", "counter"]


def test_events_are_bounded():
    telemetry = StructuredTelemetry(max_events=2)
    telemetry.start_trace("trace")

    for index in range(5):
        telemetry.record_timing(f"step{index}", 0.0)

    assert [event["name"] for event in telemetry.snapshot()["events"]] == ["step3", "step4"]
