"""
Unit tests for the scoring relay.

The relay must never raise into the pipeline, whatever the scoring
service does.
"""

import pytest
import requests
from concurrent.futures import ThreadPoolExecutor
from unittest.mock import Mock

from workers.extraction.scoring_relay import ScoringRelay

pytestmark = pytest.mark.unit

PAYLOAD = {"features": [13.5, 0.0]}


def make_relay(session, enabled=True):
    return ScoringRelay(url="http://scoring.test/predict", timeout=2.0, enabled=enabled, session=session)


@pytest.fixture
def session():
    session = Mock()
    response = Mock()
    response.json.return_value = {"prediction": "low risk"}
    session.post.return_value = response
    return session


class TestSend:
    """Tests for the synchronous send."""

    def test_posts_payload_as_json(self, session):
        assert make_relay(session).send(PAYLOAD) is True

        session.post.assert_called_once_with(
            "http://scoring.test/predict", json=PAYLOAD, timeout=2.0
        )

    def test_disabled_does_not_post(self, session):
        assert make_relay(session, enabled=False).send(PAYLOAD) is False
        session.post.assert_not_called()

    def test_connection_error_swallowed(self, session):
        session.post.side_effect = requests.exceptions.ConnectionError("refused")

        assert make_relay(session).send(PAYLOAD) is False

    def test_timeout_swallowed(self, session):
        session.post.side_effect = requests.exceptions.Timeout("slow")

        assert make_relay(session).send(PAYLOAD) is False

    def test_http_error_swallowed(self, session):
        session.post.return_value.raise_for_status.side_effect = requests.exceptions.HTTPError("500")

        assert make_relay(session).send(PAYLOAD) is False

    def test_malformed_json_swallowed(self, session):
        session.post.return_value.json.side_effect = requests.exceptions.JSONDecodeError("bad", "doc", 0)

        assert make_relay(session).send(PAYLOAD) is False

    def test_unexpected_error_swallowed(self, session):
        session.post.side_effect = RuntimeError("boom")

        assert make_relay(session).send(PAYLOAD) is False


class TestDispatch:
    """Tests for the background dispatch."""

    def test_dispatch_runs_in_background(self, session):
        executor = ThreadPoolExecutor(max_workers=1)
        relay = ScoringRelay(url="http://scoring.test/predict", timeout=2.0, enabled=True,
                             session=session, executor=executor)

        future = relay.dispatch(PAYLOAD)

        assert future.result(timeout=5) is True
        session.post.assert_called_once()
        executor.shutdown()

    def test_dispatch_failure_resolves_false(self, session):
        session.post.side_effect = requests.exceptions.ConnectionError("refused")
        relay = make_relay(session)

        assert relay.dispatch(PAYLOAD).result(timeout=5) is False
        relay.shutdown()

    def test_dispatch_disabled_returns_none(self, session):
        assert make_relay(session, enabled=False).dispatch(PAYLOAD) is None

    def test_dispatch_after_shutdown_returns_none(self, session):
        relay = make_relay(session)
        relay.executor.shutdown()

        assert relay.dispatch(PAYLOAD) is None
