"""
promptpack configuration.

Centralized configuration management using Pydantic Settings.
Loads configuration from environment variables and an optional .env file.
"""

import os
from pathlib import Path

from pydantic_settings import BaseSettings, SettingsConfigDict


def get_xdg_state_dir() -> str:
    """
    Get XDG-compliant state directory for promptpack logs.

    - Uses $XDG_STATE_HOME/promptpack/logs if XDG_STATE_HOME is set
    - Falls back to $HOME/.local/state/promptpack/logs if not set
    - Returns relative path ./logs if HOME not available (dev/testing)
    """
    xdg_state_home = os.getenv("XDG_STATE_HOME")
    if xdg_state_home:
        return str(Path(xdg_state_home) / "promptpack" / "logs")

    home = os.getenv("HOME")
    if home:
        return str(Path(home) / ".local" / "state" / "promptpack" / "logs")

    return "./logs"


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    # Plugin layout
    manifest_filename: str = "plugin.json"
    commands_dir: str = "commands"
    agents_dir: str = "agents"
    placeholder_token: str = "$ARGUMENTS"
    frontmatter_marker: str = "---"
    plugin_dirs: list[str] | str = []  # Extra plugin search directories

    # Agent matching
    agent_judge: str = "keyword"  # keyword, openai or anthropic
    agent_match_min_score: float = 0.0  # Keyword judge drops scores at or below this
    judge_max_tokens: int = 1000

    # OpenAI
    openai_api_key: str = ""
    openai_model: str = "gpt-4o-mini"

    # Anthropic
    anthropic_api_key: str = ""
    anthropic_model: str = "claude-sonnet-4-5"

    # Logging
    log_level: str = "INFO"
    log_dir: str = ""  # XDG-compliant log directory (defaults to XDG state dir if empty)
    log_format: str = "standard"  # standard or json
    log_console_enabled: bool = True
    log_file_enabled: bool = False
    log_max_bytes: int = 10_485_760  # 10MB per log file
    log_backup_count: int = 5

    @property
    def log_directory(self) -> Path:
        """Get the log directory path, using XDG default if not specified."""
        if self.log_dir:
            return Path(self.log_dir).expanduser()
        return Path(get_xdg_state_dir())

    @property
    def extra_plugin_dirs(self) -> list[Path]:
        """Extra plugin directories; accepts a comma-separated env value."""
        if isinstance(self.plugin_dirs, str):
            raw = [d.strip() for d in self.plugin_dirs.split(",")]
        else:
            raw = [str(d).strip() for d in self.plugin_dirs]
        return [Path(d).expanduser() for d in raw if d]


# Global settings instance
settings = Settings()
