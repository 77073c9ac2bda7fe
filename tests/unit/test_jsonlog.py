"""
Tests for structured JSON event logging.
"""

import json
import logging

from sparse_sgd import LabeledInstance, jsonlog
from tests.conftest import make_model


def _events(caplog):
    return [json.loads(record.getMessage()) for record in caplog.records if record.name == "sparse_sgd"]


class TestJsonLog:
    def test_record_shape(self, caplog):
        caplog.set_level(logging.DEBUG, logger="sparse_sgd")
        jsonlog.log("custom", epoch=3, rate=0.5)
        (event,) = _events(caplog)
        assert event["event"] == "custom"
        assert event["epoch"] == 3
        assert event["rate"] == 0.5
        assert isinstance(event["ts"], float)

    def test_disabled_level_emits_nothing(self, caplog):
        caplog.set_level(logging.WARNING, logger="sparse_sgd")
        jsonlog.log("quiet")
        assert _events(caplog) == []

    def test_numpy_values_serialize(self, caplog):
        import numpy as np

        caplog.set_level(logging.DEBUG, logger="sparse_sgd")
        jsonlog.log("numpy", value=np.float32(1.5))
        assert _events(caplog)[0]["value"] == 1.5


class TestModelEvents:
    def test_update_and_truncation_events(self, caplog):
        caplog.set_level(logging.DEBUG, logger="sparse_sgd")
        model = make_model(param={"a": 0.05})
        model.set_truncation_period(1).set_truncation_threshold(1.0).set_truncation_update(10.0)
        for _ in range(2):
            model.update(LabeledInstance(1.0, {"a": 1.0}))
        names = [event["event"] for event in _events(caplog)]
        assert "update" in names
        assert "truncation" in names

    def test_lifecycle_events_at_info(self, caplog):
        caplog.set_level(logging.INFO, logger="sparse_sgd")
        model = make_model(param={"a": 1.0, "b": 0.01})
        model.merge(make_model(param={"a": 1.0}))
        model.threshold_parameters(0.1)
        model.teardown()
        events = {event["event"]: event for event in _events(caplog)}
        assert events["merge"]["scaling"] == 1.0
        assert events["threshold"]["removed"] == 1
        assert events["teardown"]["n_keys"] == 1
        assert "update" not in events
