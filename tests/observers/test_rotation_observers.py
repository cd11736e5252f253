import json
import logging

from certrot.observers.dispatcher import EventBus
from certrot.observers.events import NodePlanFailed, RotationCommitted, RotationStarted, new_ctx
from certrot.observers.jsonfile import JsonFileObserver
from certrot.observers.logger import LoggerObserver


def _ctx():
    return new_ctx(env="dev", context="mgmt")


class Capture:
    def __init__(self): self.events = []
    def notify(self, event): self.events.append(event)


def test_new_ctx_shape():
    ctx = _ctx()
    assert set(ctx) == {"ts", "run_id", "env", "context"}
    assert ctx["ts"].endswith("Z")


def test_bus_keeps_going_after_observer_error():
    class Broken:
        def notify(self, event): raise RuntimeError("nope")

    cap = Capture()
    ev = RotationCommitted(cluster="edge-1", generation=4, duration_ms=10, **_ctx())
    EventBus([Broken(), cap]).emit(ev)
    assert cap.events == [ev]


def test_jsonfile_observer_writes_one_line_per_event(tmp_path):
    path = tmp_path / "events" / "run.jsonl"
    obs = JsonFileObserver(path)
    ctx = _ctx()
    obs.notify(RotationStarted(cluster="edge-1", from_generation=3, to_generation=4,
                               services=["etcd"], nodes=["cp-1"], **ctx))
    obs.notify(RotationCommitted(cluster="edge-1", generation=4, duration_ms=5, **ctx))

    lines = [json.loads(l) for l in path.read_text().splitlines()]
    assert [l["type"] for l in lines] == ["RotationStarted", "RotationCommitted"]
    assert lines[0]["services"] == ["etcd"]
    assert lines[1]["run_id"] == ctx["run_id"]


def test_logger_observer_levels(caplog):
    logger = logging.getLogger("certrot.tests.observer")
    obs = LoggerObserver(logger)
    with caplog.at_level(logging.INFO, logger="certrot.tests.observer"):
        obs.notify(RotationCommitted(cluster="edge-1", generation=4, duration_ms=5, **_ctx()))
        obs.notify(NodePlanFailed(node="cp-2", error="exit 1", **_ctx()))

    levels = [(r.levelno, r.getMessage()) for r in caplog.records]
    assert levels[0][0] == logging.INFO and "RotationCommitted" in levels[0][1]
    assert levels[1][0] == logging.ERROR and "node=cp-2" in levels[1][1]
