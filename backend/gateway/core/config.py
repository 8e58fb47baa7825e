"""
Translator Configuration

Settings are read from ``AG_*`` environment variables once and cached.
"""
import os
from functools import lru_cache
from typing import Optional

from pydantic import BaseModel

DEFAULT_CLAUDE_SYSTEM_PROMPT = "You are Claude Code, Anthropic's official CLI for Claude."


class Settings(BaseModel):
    # Fixed preamble injected as the first Claude system block
    claude_system_prompt: str = DEFAULT_CLAUDE_SYSTEM_PROMPT

    # Token budget policy for Claude-bound requests
    default_max_tokens: int = 64000
    min_tool_max_tokens: int = 32000
    thinking_headroom_tokens: int = 1024

    # Gemini CLI thinking budgets per reasoning effort
    thinking_budget_low: int = 1024
    thinking_budget_medium: int = 8192
    thinking_budget_high: int = 32768

    log_level: str = "INFO"
    log_file: Optional[str] = None

    def thinking_budget_for(self, effort: Optional[str]) -> int:
        """Map a reasoning effort keyword to a thinking budget (medium if unknown)."""
        budgets = {
            "low": self.thinking_budget_low,
            "medium": self.thinking_budget_medium,
            "high": self.thinking_budget_high,
        }
        return budgets.get((effort or "").lower(), self.thinking_budget_medium)


_ENV_FIELDS = {
    "AG_CLAUDE_SYSTEM_PROMPT": "claude_system_prompt",
    "AG_DEFAULT_MAX_TOKENS": "default_max_tokens",
    "AG_MIN_TOOL_MAX_TOKENS": "min_tool_max_tokens",
    "AG_THINKING_HEADROOM_TOKENS": "thinking_headroom_tokens",
    "AG_THINKING_BUDGET_LOW": "thinking_budget_low",
    "AG_THINKING_BUDGET_MEDIUM": "thinking_budget_medium",
    "AG_THINKING_BUDGET_HIGH": "thinking_budget_high",
    "AG_LOG_LEVEL": "log_level",
    "AG_LOG_FILE": "log_file",
}


def load_settings() -> Settings:
    """Build settings from the process environment."""
    values = {}
    for env_name, field_name in _ENV_FIELDS.items():
        value = os.environ.get(env_name)
        if value:
            values[field_name] = value
    return Settings(**values)


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    return load_settings()


def reset_settings() -> None:
    """Drop the cached settings so the next call re-reads the environment."""
    get_settings.cache_clear()
