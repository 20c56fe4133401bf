import os

import pytest

# Keep connect attempts in tests short
os.environ.setdefault("IRC_CONNECT_TIMEOUT", "1")

from tests.fixtures.irc_fixtures import (  # noqa: E402
    DummySession,
    FakeContext,
    RecordingSink,
    configured_session,
)


@pytest.fixture
def context() -> FakeContext:
    return FakeContext()


@pytest.fixture
def sink() -> RecordingSink:
    return RecordingSink()


@pytest.fixture
def session(sink: RecordingSink) -> DummySession:
    """Configured, inactive session that captures sent lines."""
    return configured_session(sink=sink)  # type: ignore[return-value]
