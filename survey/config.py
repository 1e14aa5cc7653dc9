from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path

from proccore.config import ProcConfig


@dataclass
class SurveySettings:
    host: str = "localhost:2501"
    stream_path: str = "/pcap/all_packets.pcapng"
    httpd_conf: Path = Path.home() / ".kismet" / "kismet_httpd.conf"
    hint_map: Path = Path.home() / ".config" / "kismetproc" / "hints.json"
    segment_sec: int = 3600
    segment_prefix: str = "kismet"
    output_dir: Path = Path(".")

    @property
    def stream_url(self) -> str:
        return f"http://{self.host}{self.stream_path}"


def load_settings(config: ProcConfig) -> SurveySettings:
    defaults = SurveySettings()
    try:
        segment_sec = int(config.get("KISMET_SEGMENT_SEC", str(defaults.segment_sec)))
    except ValueError:
        segment_sec = defaults.segment_sec
    return SurveySettings(
        host=config.get("KISMET_HOST", defaults.host),
        stream_path=config.get("KISMET_STREAM_PATH", defaults.stream_path),
        httpd_conf=Path(config.get("KISMET_HTTPD_CONF", str(defaults.httpd_conf))).expanduser(),
        hint_map=Path(config.get("KISMET_HINT_MAP", str(defaults.hint_map))).expanduser(),
        segment_sec=max(1, segment_sec),
        segment_prefix=config.get("KISMET_SEGMENT_PREFIX", defaults.segment_prefix),
        output_dir=Path(config.get("KISMET_OUTPUT_DIR", str(defaults.output_dir))).expanduser(),
    )
