"""
Gateway translation core.

Converts chat-completion requests and streamed responses between the OpenAI,
Claude, Gemini, Gemini CLI and Antigravity wire formats.
"""

__version__ = "1.0.0"
