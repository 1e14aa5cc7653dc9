"""
Shared pytest fixtures.

Contexts are built from an explicit environment (no dotenv lookup) with TMPDIR
pointed into tmp_path, and every reporting channel recorded in memory:

    def test_something(ctx, recorder):
        ctx.reporter.warning("careful")
        assert recorder.messages(Channel.WARNING) == ["careful"]
"""

import pytest

from proccore.context import make_context
from proccore.report import Channel, Reporter


class Recorder:
    def __init__(self):
        self.records = []

    def sink(self, channel):
        def _sink(prefix, message):
            self.records.append((channel, prefix, message))

        return _sink

    def sinks(self):
        return {ch: self.sink(ch) for ch in Channel}

    def messages(self, channel):
        return [m for c, _p, m in self.records if c is channel]

    def prefixes(self, channel):
        return [p for c, p, _m in self.records if c is channel]


@pytest.fixture
def recorder():
    return Recorder()


@pytest.fixture
def tmpdir_env(tmp_path):
    """Minimal explicit environment for Dispatcher.run / make_context."""
    return {"TMPDIR": str(tmp_path / "tmp")}


@pytest.fixture
def ctx(tmpdir_env, recorder):
    context = make_context("testproc", environ=tmpdir_env)
    context.reporter = Reporter(recorder.sinks(), prog="testproc")
    return context
