"""Configuration loading from environment variables and birthdaybook.toml."""

from __future__ import annotations

import os
import sys
from dataclasses import dataclass, field

if sys.version_info >= (3, 11):
    import tomllib
else:
    import tomli as tomllib
from pathlib import Path

_DEFAULT_HOME = Path.home() / ".birthdaybook"
_CONFIG_FILENAME = "birthdaybook.toml"

DEFAULT_GREETING = "祝你生日快樂！"


@dataclass
class FeishuConfig:
    """Feishu notification sink configuration."""

    app_id: str = ""
    app_secret: str = ""
    chat_id: str = ""


@dataclass
class NotifyConfig:
    """Which notification sinks are active."""

    console: bool = True
    default_greeting: str = DEFAULT_GREETING
    feishu: FeishuConfig = field(default_factory=FeishuConfig)


@dataclass
class SchedulerConfig:
    """Scheduler configuration."""

    check_interval: int = 60
    keep_versions: int = 50


@dataclass
class BookConfig:
    """Top-level birthday book configuration."""

    notify: NotifyConfig = field(default_factory=NotifyConfig)
    scheduler: SchedulerConfig = field(default_factory=SchedulerConfig)
    data_dir: Path = _DEFAULT_HOME / "data"
    pid_file: Path = _DEFAULT_HOME / "birthdaybook.pid"
    log_level: str = "INFO"


def load_config(config_path: Path | None = None) -> BookConfig:
    """Load configuration from environment variables and optional birthdaybook.toml.

    Priority: environment variables > birthdaybook.toml > defaults.
    """
    file_data: dict = {}
    if config_path and config_path.exists():
        file_data = tomllib.loads(config_path.read_text())
    else:
        # Search current dir and ~/.birthdaybook/
        for candidate in [Path.cwd() / _CONFIG_FILENAME, _DEFAULT_HOME / _CONFIG_FILENAME]:
            if candidate.exists():
                file_data = tomllib.loads(candidate.read_text())
                break

    notify_data = file_data.get("notify", {})
    feishu_data = notify_data.get("feishu", {})
    scheduler_data = file_data.get("scheduler", {})

    config = BookConfig(
        notify=NotifyConfig(
            console=bool(notify_data.get("console", True)),
            default_greeting=notify_data.get("default_greeting", DEFAULT_GREETING),
            feishu=FeishuConfig(
                app_id=os.getenv("FEISHU_APP_ID", feishu_data.get("app_id", "")),
                app_secret=os.getenv("FEISHU_APP_SECRET", feishu_data.get("app_secret", "")),
                chat_id=os.getenv("FEISHU_CHAT_ID", feishu_data.get("chat_id", "")),
            ),
        ),
        scheduler=SchedulerConfig(
            check_interval=int(
                os.getenv(
                    "BIRTHDAYBOOK_CHECK_INTERVAL", scheduler_data.get("check_interval", 60)
                )
            ),
            keep_versions=int(scheduler_data.get("keep_versions", 50)),
        ),
        data_dir=Path(
            os.getenv("BIRTHDAYBOOK_DATA_DIR", file_data.get("data_dir", str(_DEFAULT_HOME / "data")))
        ).expanduser(),
        pid_file=Path(file_data.get("pid_file", str(_DEFAULT_HOME / "birthdaybook.pid"))).expanduser(),
        log_level=os.getenv("BIRTHDAYBOOK_LOG_LEVEL", file_data.get("log_level", "INFO")),
    )
    return config
