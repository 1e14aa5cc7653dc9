"""
Tests for the reporting channel registry.

These tests validate:
- Sink settings (echo, no-op, external command)
- report() never raises, whatever the sink does
- Trace events are structured and recorded
"""

import json

import pytest

from proccore.report import (
    COMPLETE_PREFIX,
    Channel,
    CommandSink,
    Reporter,
    TraceEvent,
    echo_sink,
    null_sink,
    sink_from_setting,
    traced,
)


class TestSinkFromSetting:
    @pytest.mark.parametrize("setting", [":", "", None, "none", "true", "  :  "])
    def test_noop_settings(self, setting):
        assert sink_from_setting(setting) is null_sink

    def test_echo(self):
        assert sink_from_setting("echo") is echo_sink

    def test_other_value_is_command(self):
        sink = sink_from_setting("logger -t kismetproc")
        assert isinstance(sink, CommandSink)
        assert sink.argv == ["logger", "-t", "kismetproc"]


class TestDefaults:
    def test_error_and_warning_echo_by_default(self, capsys):
        reporter = Reporter.from_settings({})
        reporter.error("boom")
        reporter.warning("careful")
        err = capsys.readouterr().err
        assert "[!] ERROR: boom" in err
        assert "[!] WARNING: careful" in err

    def test_other_channels_silent_by_default(self, capsys):
        from proccore.config import REPORT_DEFAULTS

        reporter = Reporter.from_settings(REPORT_DEFAULTS)
        reporter.caution("c")
        reporter.information("i")
        reporter.telemetry("t")
        reporter.debug("d")
        captured = capsys.readouterr()
        assert captured.err == ""
        assert captured.out == ""

    def test_override_enables_channel(self, capsys):
        reporter = Reporter.from_settings({"reportInformation": "echo"})
        reporter.information("hello")
        reporter.complete("done")
        err = capsys.readouterr().err
        assert "[-] INFO: hello" in err
        assert "[+] INFO: done" in err


class TestNeverRaises:
    def test_failing_callable_sink_is_swallowed(self, capsys):
        def broken(prefix, message):
            raise RuntimeError("sink down")

        reporter = Reporter({Channel.ERROR: broken})
        reporter.error("still fine")
        err = capsys.readouterr().err
        assert "REPORT SINK FAILED" in err
        assert "still fine" in err

    def test_missing_external_command_is_swallowed(self):
        reporter = Reporter.from_settings({"reportWarning": "/nonexistent/sink-command"})
        reporter.warning("no crash")

    def test_failing_external_command_is_swallowed(self):
        reporter = Reporter.from_settings({"reportWarning": "false"})
        reporter.warning("no crash")


class TestCommandSink:
    def test_passes_prefix_and_message_as_arguments(self, monkeypatch):
        calls = []

        def fake_run(argv, stdout=None, check=False):
            calls.append(argv)

        monkeypatch.setattr("proccore.report.subprocess.run", fake_run)
        CommandSink("logger -t proc")("[!] ERROR:", "bad thing")
        assert calls == [["logger", "-t", "proc", "[!] ERROR:", "bad thing"]]


class TestChannelPrefixes:
    def test_each_channel_uses_its_prefix(self, recorder):
        reporter = Reporter(recorder.sinks())
        reporter.error("e")
        reporter.warning("w")
        reporter.caution("c")
        reporter.information("i")
        reporter.complete("k")
        reporter.debug("d")
        assert recorder.prefixes(Channel.ERROR) == ["[!] ERROR:"]
        assert recorder.prefixes(Channel.WARNING) == ["[!] WARNING:"]
        assert recorder.prefixes(Channel.CAUTION) == ["[^] CAUTION:"]
        assert recorder.prefixes(Channel.INFORMATION) == ["[-] INFO:", COMPLETE_PREFIX]
        assert recorder.prefixes(Channel.DEBUG) == ["[.] DEBUG:"]

    def test_telemetry_is_tagged_with_program(self, recorder):
        reporter = Reporter(recorder.sinks(), prog="kismetproc")
        reporter.telemetry("main()")
        assert recorder.messages(Channel.TELEMETRY) == ["kismetproc::main()"]


class TestTrace:
    def test_trace_event_json(self):
        event = TraceEvent(op="p::op", phase="enter", args=["'x'"], ts=12.5)
        assert json.loads(event.to_json()) == {"op": "p::op", "phase": "enter", "args": ["'x'"], "ts": 12.5}
        assert "args" not in json.loads(event.to_json(with_args=False))

    def test_trace_goes_to_telemetry_and_debug(self, recorder):
        reporter = Reporter(recorder.sinks())
        reporter.trace("p::op", "enter", ("a", 1))
        telemetry = json.loads(recorder.messages(Channel.TELEMETRY)[0])
        debug = json.loads(recorder.messages(Channel.DEBUG)[0])
        assert telemetry["op"] == "p::op"
        assert "args" not in telemetry
        assert debug["args"] == ["a", "1"]
        assert isinstance(debug["ts"], float)

    def test_events_are_kept(self):
        reporter = Reporter(keep_events=2)
        for i in range(3):
            reporter.trace(f"op{i}", "enter")
        assert [e.op for e in reporter.events] == ["op1", "op2"]

    def test_trace_file_receives_jsonl(self, tmp_path):
        trace_file = tmp_path / "trace.jsonl"
        reporter = Reporter(trace_file=trace_file)
        reporter.trace("op", "enter", ("x",))
        reporter.trace("op", "return")
        lines = trace_file.read_text().splitlines()
        assert [json.loads(l)["phase"] for l in lines] == ["enter", "return"]

    def test_traced_emits_enter_and_return(self, ctx):
        @traced
        def operation(ctx, value, flag=False):
            return value * 2

        assert operation(ctx, 21, flag=True) == 42
        events = [(e.op, e.phase) for e in ctx.reporter.events]
        assert events == [("testproc::operation", "enter"), ("testproc::operation", "return")]
        assert ctx.reporter.events[0].args == ["21", "flag=True"]

    def test_traced_emits_return_on_exception(self, ctx):
        @traced
        def failing(ctx):
            raise ValueError("nope")

        with pytest.raises(ValueError):
            failing(ctx)
        assert [e.phase for e in ctx.reporter.events] == ["enter", "return"]
