"""
Identifier and Clock Provider

Translators never call uuid/time/random directly; they go through an
``IdProvider`` so tests can substitute deterministic values.
"""
import random
import time
import uuid

PROJECT_ADJECTIVES = ["useful", "bright", "swift", "calm", "bold", "keen", "vivid", "brisk"]
PROJECT_NOUNS = ["fuze", "wave", "spark", "flow", "core", "beam", "node", "pulse"]


class IdProvider:
    """Default provider backed by uuid4, the wall clock and ``random``."""

    def uuid(self) -> str:
        return str(uuid.uuid4())

    def now(self) -> int:
        """Current Unix time in seconds."""
        return int(time.time())

    def now_ms(self) -> int:
        """Current Unix time in milliseconds."""
        return int(time.time() * 1000)

    def request_id(self) -> str:
        return f"agent-{self.uuid()}"

    def session_id(self) -> str:
        return f"-{random.randint(10**17, 10**18 - 1)}"

    def project_id(self) -> str:
        adjective = random.choice(PROJECT_ADJECTIVES)
        noun = random.choice(PROJECT_NOUNS)
        suffix = self.uuid().replace("-", "")[:5]
        return f"{adjective}-{noun}-{suffix}"


default_ids = IdProvider()
