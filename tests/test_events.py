import json

import pytest

from talescape.services.events import (
    CompositeObserver,
    EventLog,
    FlagChanged,
    Occurrence,
    StatChanged,
)


class _Collector:
    def __init__(self) -> None:
        self.seen: list[Occurrence] = []

    def observe(self, occurrence: Occurrence) -> None:
        self.seen.append(occurrence)


def test_event_log_evicts_oldest_first() -> None:
    log = EventLog(capacity=2)
    for index in range(3):
        log.observe(FlagChanged(flag_name=f"f{index}", old_value=None, new_value=index))
    assert log.count == 2
    assert [event.occurrence.flag_name for event in log.events()] == ["f1", "f2"]
    assert log.capacity == 2


def test_event_log_rejects_zero_capacity() -> None:
    with pytest.raises(ValueError):
        EventLog(capacity=0)


def test_recent_and_type_filters() -> None:
    log = EventLog()
    log.observe(FlagChanged(flag_name="a", old_value=None, new_value=True))
    log.observe(StatChanged(stat_name="health", old_value=100, new_value=90))
    log.observe(FlagChanged(flag_name="b", old_value=None, new_value=False))
    assert [event.event_type for event in log.recent(2)] == ["FlagChanged", "StatChanged"]
    assert log.recent(0) == []
    assert log.count_of_type(FlagChanged) == 2
    assert len(log.events_of_type(StatChanged)) == 1
    assert StatChanged(stat_name="health", old_value=100, new_value=90).change == -10
    log.clear()
    assert log.count == 0


def test_export_json_includes_payload() -> None:
    log = EventLog()
    log.observe(StatChanged(stat_name="health", old_value=100, new_value=90))
    exported = json.loads(log.export_json())
    assert exported[0]["event_type"] == "StatChanged"
    assert exported[0]["data"] == {"stat_name": "health", "old_value": 100, "new_value": 90}


def test_composite_observer_fans_out_in_order() -> None:
    first, second = _Collector(), _Collector()
    composite = CompositeObserver([first])
    composite.add_observer(second)
    occurrence = FlagChanged(flag_name="x", old_value=None, new_value=1)
    composite.observe(occurrence)
    assert first.seen == [occurrence]
    assert second.seen == [occurrence]
    composite.remove_observer(first)
    assert composite.observers == (second,)
