"""Runtime settings read from the environment (and an optional ``.env`` file)."""

from __future__ import annotations

import os
from dataclasses import dataclass, replace
from typing import Optional

from dotenv import find_dotenv, load_dotenv

from .corpus import DEFAULT_MIN_TOKEN_COUNT, DEFAULT_TOXICITY_THRESHOLD
from .models import MissingTokenPolicy

ENV_PREFIX = "TOXIC_NB_"


@dataclass(frozen=True)
class Settings:
    """Pipeline configuration.

    Attributes:
        test_ratio: Share of each class held out for testing.
        seed: Split seed; ``None`` draws a fresh random split every run.
        min_token_count: Corpus-wide minimum frequency for a token to be kept.
        policy: Scoring policy for tokens missing from a probability table.
        toxicity_threshold: Rating sums strictly below this are toxic.
    """

    test_ratio: float = 0.2
    seed: Optional[int] = None
    min_token_count: int = DEFAULT_MIN_TOKEN_COUNT
    policy: MissingTokenPolicy = MissingTokenPolicy.SKIP_MISSING
    toxicity_threshold: float = DEFAULT_TOXICITY_THRESHOLD

    def __post_init__(self) -> None:
        if not 0.0 <= self.test_ratio < 1.0:
            raise ValueError("test_ratio must be in [0, 1)")
        if self.min_token_count < 1:
            raise ValueError("min_token_count must be at least 1")

    @classmethod
    def from_env(cls, load_dotenv_file: bool = True) -> "Settings":
        """Build settings from ``TOXIC_NB_*`` environment variables.

        Raises:
            ValueError: If a variable holds an invalid value.
        """
        if load_dotenv_file:
            load_dotenv(find_dotenv(usecwd=True))

        def get(name: str) -> Optional[str]:
            value = os.getenv(ENV_PREFIX + name)
            return value.strip() if value and value.strip() else None

        parsers = {
            "TEST_RATIO": ("test_ratio", float),
            "SEED": ("seed", int),
            "MIN_TOKEN_COUNT": ("min_token_count", int),
            "MISSING_TOKEN_POLICY": ("policy", lambda v: MissingTokenPolicy(v.lower())),
            "TOXICITY_THRESHOLD": ("toxicity_threshold", float),
        }

        kwargs: dict = {}
        try:
            for name, (field_name, parse) in parsers.items():
                value = get(name)
                if value is not None:
                    kwargs[field_name] = parse(value)
        except ValueError as exc:
            raise ValueError(f"Invalid {ENV_PREFIX}* setting: {exc}") from exc

        return cls(**kwargs)

    def override(self, **changes) -> "Settings":
        """Return a copy with every non-``None`` change applied."""
        return replace(self, **{k: v for k, v in changes.items() if v is not None})
