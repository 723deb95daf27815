from __future__ import annotations

import pytest

from shared.events import SwitchEventType, SwitchState
from audio_switcher.state_machine import InactivityStateMachine, percent_complete

from conftest import FakeDirectory, HEADSET, SPEAKERS

THRESHOLD_MS = 15000


def _machine(directory: FakeDirectory, *, threshold_ms: int = THRESHOLD_MS) -> InactivityStateMachine:
    return InactivityStateMachine(
        SPEAKERS.device_id,
        threshold_ms,
        directory.set_default_playback_device,
    )


def _run(machine, directory, samples):
    states = []
    for idle_ms in samples:
        machine.tick(idle_ms, directory.get_current_default_playback_device())
        states.append(machine.state)
    return states


def _types(events):
    return [event.type for event in events]


def test_rejects_non_positive_thresholds():
    with pytest.raises(ValueError):
        InactivityStateMachine("id", 0, lambda _: None)
    with pytest.raises(ValueError):
        InactivityStateMachine("id", 1000, lambda _: None, activity_reset_ms=0)


def test_below_threshold_never_switches():
    directory = FakeDirectory()
    machine = _machine(directory)

    states = _run(machine, directory, [0, 1000, 7500, 14999])

    assert states == [SwitchState.ARMED] * 4
    assert directory.switch_calls == []


def test_documented_idle_episode_sequence():
    directory = FakeDirectory()
    machine = _machine(directory)

    states = _run(machine, directory, [0, 5000, 10000, 16000, 16000, 500])

    assert states == [
        SwitchState.ARMED,
        SwitchState.ARMED,
        SwitchState.ARMED,
        SwitchState.SWITCHED,
        SwitchState.SWITCHED,
        SwitchState.ARMED,
    ]
    assert directory.switch_calls == [SPEAKERS.device_id]


def test_one_switch_per_idle_episode_regardless_of_tick_count():
    directory = FakeDirectory()
    machine = _machine(directory)

    _run(machine, directory, [15000 + i * 1000 for i in range(30)])

    assert directory.switch_calls == [SPEAKERS.device_id]
    assert machine.state is SwitchState.SWITCHED


def test_switch_succeeds_when_threshold_reached_exactly():
    directory = FakeDirectory()
    machine = _machine(directory)

    events = machine.tick(THRESHOLD_MS, HEADSET.device_id)

    assert _types(events) == [
        SwitchEventType.SWITCH_ATTEMPTED,
        SwitchEventType.SWITCH_SUCCEEDED,
        SwitchEventType.STATUS_TICK,
    ]
    assert events[-1].state is SwitchState.SWITCHED
    assert events[-1].percent_complete == 100.0


def test_already_on_target_transitions_without_switch_call():
    directory = FakeDirectory(default_id=SPEAKERS.device_id)
    machine = _machine(directory)

    events = machine.tick(16000, SPEAKERS.device_id)

    assert machine.state is SwitchState.SWITCHED
    assert directory.switch_calls == []
    assert _types(events) == [SwitchEventType.SWITCH_SUCCEEDED, SwitchEventType.STATUS_TICK]
    assert events[0].already_default is True


def test_failed_switch_stays_armed_and_retries_next_tick():
    directory = FakeDirectory()
    directory.fail_switches = 1
    machine = _machine(directory)

    first = machine.tick(16000, directory.get_current_default_playback_device())
    assert machine.state is SwitchState.ARMED
    assert _types(first) == [
        SwitchEventType.SWITCH_ATTEMPTED,
        SwitchEventType.SWITCH_FAILED,
        SwitchEventType.STATUS_TICK,
    ]
    assert "rejected" in first[1].error

    second = machine.tick(17000, directory.get_current_default_playback_device())
    assert machine.state is SwitchState.SWITCHED
    assert SwitchEventType.SWITCH_SUCCEEDED in _types(second)
    assert directory.switch_calls == [SPEAKERS.device_id, SPEAKERS.device_id]


def test_persistent_failure_retries_every_tick():
    directory = FakeDirectory()
    directory.fail_switches = 5
    machine = _machine(directory)

    _run(machine, directory, [16000, 17000, 18000, 19000, 20000])

    assert len(directory.switch_calls) == 5
    assert machine.state is SwitchState.ARMED


def test_only_switch_error_is_recovered():
    def _explode(_device_id):
        raise RuntimeError("unexpected")

    machine = InactivityStateMachine(SPEAKERS.device_id, THRESHOLD_MS, _explode)

    with pytest.raises(RuntimeError):
        machine.tick(16000, HEADSET.device_id)


def test_switched_stays_switched_while_idle_above_reset():
    directory = FakeDirectory()
    machine = _machine(directory)
    machine.tick(16000, HEADSET.device_id)

    for idle_ms in (1000, 1500, 5000, 16000, 1000):
        events = machine.tick(idle_ms, directory.get_current_default_playback_device())
        assert machine.state is SwitchState.SWITCHED
        assert _types(events) == [SwitchEventType.STATUS_TICK]
    assert len(directory.switch_calls) == 1


def test_rearms_exactly_once_on_fresh_activity():
    directory = FakeDirectory()
    machine = _machine(directory)
    machine.tick(16000, HEADSET.device_id)

    first = machine.tick(999, SPEAKERS.device_id)
    second = machine.tick(200, SPEAKERS.device_id)

    assert _types(first) == [SwitchEventType.REARMED, SwitchEventType.STATUS_TICK]
    assert _types(second) == [SwitchEventType.STATUS_TICK]
    assert machine.armed


def test_new_episode_switches_again_after_user_changed_device_back():
    directory = FakeDirectory()
    machine = _machine(directory)

    _run(machine, directory, [16000, 300])
    directory.default_id = HEADSET.device_id
    _run(machine, directory, [4000, 15000, 16000])

    assert directory.switch_calls == [SPEAKERS.device_id, SPEAKERS.device_id]


def test_negative_idle_samples_are_treated_as_zero():
    directory = FakeDirectory()
    machine = _machine(directory)

    events = machine.tick(-50, HEADSET.device_id)

    assert events[-1].idle_ms == 0
    assert events[-1].percent_complete == 0.0


def test_status_event_reports_progress_and_target():
    machine = _machine(FakeDirectory())

    (status,) = machine.tick(7500, HEADSET.device_id)

    assert status.type is SwitchEventType.STATUS_TICK
    assert status.percent_complete == 50.0
    assert status.device_id == SPEAKERS.device_id
    assert status.idle_seconds == 7.5
    assert "50%" in status.describe()


def test_percent_complete_is_monotonic_and_clamped():
    samples = range(0, 30001, 250)
    values = [percent_complete(d, THRESHOLD_MS) for d in samples]

    assert values == sorted(values)
    assert values[0] == 0.0
    assert percent_complete(THRESHOLD_MS, THRESHOLD_MS) == 100.0
    assert max(values) == 100.0
    assert percent_complete(10 * THRESHOLD_MS, THRESHOLD_MS) == 100.0

