"""
Tests for ProcConfig loading: defaults, explicit environment, dotenv files.
"""

from pathlib import Path

from proccore.cleanup import EXIT_USAGE
from proccore.config import REPORT_DEFAULTS, load_config
from proccore.dispatch import Dispatcher
from survey.config import SurveySettings, load_settings


class TestLoadConfig:
    def test_defaults(self):
        config = load_config({})
        assert config.sinks == REPORT_DEFAULTS
        assert config.sinks["reportError"] == "echo"
        assert config.sinks["reportDebug"] == ":"
        assert config.tmpdir == Path("/tmp")
        assert config.trace_file is None

    def test_overrides(self, tmp_path):
        config = load_config({
            "reportDebug": "echo",
            "TMPDIR": str(tmp_path),
            "REPORT_TRACE_FILE": str(tmp_path / "t.jsonl"),
        })
        assert config.sinks["reportDebug"] == "echo"
        assert config.sinks["reportError"] == "echo"
        assert config.tmpdir == tmp_path
        assert config.trace_file == tmp_path / "t.jsonl"

    def test_empty_sink_setting_keeps_default(self):
        config = load_config({"reportError": "", "reportWarning": "", "reportDebug": ""})
        assert config.sinks["reportError"] == "echo"
        assert config.sinks["reportWarning"] == "echo"
        assert config.sinks["reportDebug"] == ":"

    def test_empty_error_setting_still_prints_errors(self, tmp_path, capsys):
        env = {"TMPDIR": str(tmp_path), "reportError": ""}
        assert Dispatcher("t", []).run(["bogus"], environ=env) == EXIT_USAGE
        assert "[!] ERROR: Unknown subcommand: bogus" in capsys.readouterr().err

    def test_get_falls_back_on_empty(self):
        config = load_config({"KISMET_HOST": ""})
        assert config.get("KISMET_HOST", "localhost:2501") == "localhost:2501"

    def test_dotenv_files_are_read(self, tmp_path, monkeypatch):
        monkeypatch.chdir(tmp_path)
        for key in ("reportDebug", "reportCaution"):
            monkeypatch.setenv(key, "placeholder")
            monkeypatch.delenv(key)
        (tmp_path / ".env.local").write_text("reportDebug=echo\n")
        (tmp_path / ".env").write_text("reportDebug=ignored\nreportCaution=echo\n")
        config = load_config()
        assert config.sinks["reportDebug"] == "echo"
        assert config.sinks["reportCaution"] == "echo"

    def test_environment_wins_over_dotenv(self, tmp_path, monkeypatch):
        monkeypatch.chdir(tmp_path)
        monkeypatch.setenv("reportWarning", ":")
        (tmp_path / ".env").write_text("reportWarning=echo\n")
        assert load_config().sinks["reportWarning"] == ":"


class TestSurveySettings:
    def test_defaults(self):
        settings = load_settings(load_config({}))
        assert settings.host == "localhost:2501"
        assert settings.segment_sec == 3600
        assert settings.stream_url == "http://localhost:2501/pcap/all_packets.pcapng"

    def test_overrides(self, tmp_path):
        settings = load_settings(load_config({
            "KISMET_HOST": "sensor:2501",
            "KISMET_STREAM_PATH": "/datasource/pcap/all_sources.pcapng",
            "KISMET_SEGMENT_SEC": "60",
            "KISMET_OUTPUT_DIR": str(tmp_path),
            "KISMET_HINT_MAP": str(tmp_path / "hints.json"),
        }))
        assert settings.stream_url == "http://sensor:2501/datasource/pcap/all_sources.pcapng"
        assert settings.segment_sec == 60
        assert settings.output_dir == tmp_path
        assert settings.hint_map == tmp_path / "hints.json"

    def test_bad_segment_length_uses_default(self):
        settings = load_settings(load_config({"KISMET_SEGMENT_SEC": "hourly"}))
        assert settings.segment_sec == SurveySettings().segment_sec
