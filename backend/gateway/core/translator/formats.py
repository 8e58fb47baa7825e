"""
Wire Formats

Identifiers for every wire format the gateway can translate between.
"""
from enum import Enum


class Format(str, Enum):
    OPENAI = "openai"
    CLAUDE = "claude"
    GEMINI = "gemini"
    GEMINI_CLI = "gemini-cli"
    ANTIGRAVITY = "antigravity"

    def __str__(self) -> str:
        return self.value


GEMINI_FAMILY = (Format.GEMINI, Format.GEMINI_CLI, Format.ANTIGRAVITY)
