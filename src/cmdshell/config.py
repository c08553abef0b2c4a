"""Configuration for cmdshell sessions.

Contains the ShellConfig dataclass, loading from YAML and merging of
explicit overrides.
"""

from dataclasses import dataclass, fields
from pathlib import Path

import yaml

from .history import DEFAULT_HISTORY_LIMIT

# === Constants ===

CONFIG_FILE = Path("cmdshell.yaml")
DEFAULT_PROMPT = "> "
SHELL_ESCAPE = "!"


# === ShellConfig ===


@dataclass
class ShellConfig:
    """Session configuration"""

    prompt: str = DEFAULT_PROMPT
    history_file: str = ""  # Empty = no history persistence
    history_limit: int = DEFAULT_HISTORY_LIMIT  # Newest entries kept on save (0 = all)

    # Shell escape ("!ls -l")
    enable_shell: bool = False
    shell_escape: str = SHELL_ESCAPE

    # Background execution built-in
    enable_async: bool = False
    async_command: str = "go"

    # Output
    display: str = "auto"  # auto | ansi | console

    # Logging
    log_level: str = "warning"
    log_json: bool = False
    log_file: Path | None = None

    def __post_init__(self):
        if self.display not in ("auto", "ansi", "console"):
            raise ValueError(f"display must be auto, ansi or console, not {self.display!r}")
        if not self.shell_escape:
            raise ValueError("shell_escape must not be empty")
        if self.log_file is not None and not isinstance(self.log_file, Path):
            self.log_file = Path(self.log_file)


# === Config Loading ===


def load_config_from_yaml(config_path: Path = CONFIG_FILE) -> dict:
    """Load the ``shell`` section of a YAML configuration file.

    Args:
        config_path: Path to the configuration file.

    Returns:
        Dictionary with configuration values (empty if the file is missing
        or unreadable).
    """
    if not config_path.exists():
        return {}

    try:
        with open(config_path) as f:
            data = yaml.safe_load(f) or {}

        shell = data.get("shell", {}) or {}
        history = shell.get("history", {}) or {}
        logging_cfg = shell.get("logging", {}) or {}

        return {
            "prompt": shell.get("prompt"),
            "history_file": history.get("file"),
            "history_limit": history.get("limit"),
            "enable_shell": shell.get("enable_shell"),
            "shell_escape": shell.get("shell_escape"),
            "enable_async": shell.get("enable_async"),
            "async_command": shell.get("async_command"),
            "display": shell.get("display"),
            "log_level": logging_cfg.get("level"),
            "log_json": logging_cfg.get("json"),
            "log_file": Path(logging_cfg["file"]) if logging_cfg.get("file") else None,
        }
    except Exception as e:
        print(f"Warning: Failed to load config from {config_path}: {e}")
        return {}


def build_config(yaml_config: dict, **overrides) -> ShellConfig:
    """Build ShellConfig from YAML values and explicit overrides.

    Overrides win over YAML; ``None`` values are ignored in both.

    Raises:
        TypeError: For keys ShellConfig does not have.
    """
    known = {f.name for f in fields(ShellConfig)}
    config_kwargs = {}

    for source in (yaml_config, overrides):
        for key, value in source.items():
            if value is None:
                continue
            if key not in known:
                raise TypeError(f"unknown config key: {key}")
            config_kwargs[key] = value

    return ShellConfig(**config_kwargs)
