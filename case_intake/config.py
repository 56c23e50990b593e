"""
Configuration for the case intake engine.

Policy thresholds live in one declarative structure so tuning the interview
does not require touching control flow. Runtime settings are read from the
environment (and an optional .env file in the working directory).
"""

from __future__ import annotations

import os
from dataclasses import dataclass, field, replace
from enum import Enum
from pathlib import Path
from typing import Optional


class AnalysisDepth(str, Enum):
    """How deep the interview goes. Quick uses the reduced phase sequence."""
    QUICK = "quick"
    STANDARD = "standard"
    THOROUGH = "thorough"

    @classmethod
    def from_string(
        cls,
        value: str | AnalysisDepth | None,
        default: Optional[AnalysisDepth] = None,
    ) -> AnalysisDepth:
        """Normalize arbitrary user input into a valid depth."""
        if isinstance(value, cls):
            return value
        if not value:
            if default is None:
                raise ValueError("Analysis depth is required.")
            return default
        normalized = value.strip().lower()
        for candidate in cls:
            if candidate.value == normalized:
                return candidate
        if default is not None:
            return default
        raise ValueError(f"Unsupported analysis depth: {value}")


@dataclass(frozen=True)
class PolicyConfig:
    """Numeric policy constants for scoring, transitions and follow-ups."""

    # Answer length thresholds (characters)
    min_answer_length: int = 10          # Below this: critically short
    short_answer_length: int = 30        # Below this: lacks detail
    substantive_answer_length: int = 20  # Below this: trivial answer for transitions
    new_information_length: int = 50     # Longer answers likely carry new information

    # Phase transition margins over a phase's minimum question count
    extra_questions_on_short: int = 2
    extra_questions_without_new_info: int = 1
    max_extra_questions: int = 5

    # Follow-up policy
    follow_up_cap: int = 2
    max_follow_up_candidates: int = 2

    # Score penalties (score starts at 100)
    critical_short_penalty: int = 40
    moderate_short_penalty: int = 25
    strong_vague_penalty: int = 20
    mild_vague_penalty: int = 10
    missing_detail_penalty: int = 15
    off_topic_penalty: int = 30
    contradiction_penalty: int = 10
    unfinished_penalty: int = 10

    # Hedging marker counts
    strong_vague_markers: int = 3
    mild_vague_markers: int = 2

    # Quality band floors
    excellent_floor: int = 80
    good_floor: int = 60
    acceptable_floor: int = 40
    poor_floor: int = 20

    # Off-topic detection only runs for questions with enough content words
    min_overlap_words: int = 1


DEFAULT_POLICY = PolicyConfig()


def _load_dotenv(path: Optional[Path] = None):
    """Load KEY=VALUE lines from a .env file without overriding the environment."""
    env_path = path or Path.cwd() / ".env"
    if not env_path.exists():
        return
    for line in env_path.read_text().splitlines():
        line = line.strip()
        if line and not line.startswith("#") and "=" in line:
            key, _, value = line.partition("=")
            os.environ.setdefault(key.strip(), value.strip())


def _env_int(name: str, default: int) -> int:
    raw = os.environ.get(name)
    if raw is None or not raw.strip():
        return default
    try:
        return int(raw)
    except ValueError as exc:
        raise ValueError(f"{name} must be an integer, got {raw!r}") from exc


@dataclass
class IntakeSettings:
    """Top-level settings for an interview session."""
    depth: AnalysisDepth = AnalysisDepth.STANDARD
    country: str = ""
    use_llm: bool = False  # Word questions with an LLM provider
    policy: PolicyConfig = field(default_factory=PolicyConfig)

    @classmethod
    def from_env(cls, dotenv_path: Optional[Path] = None) -> IntakeSettings:
        """Build settings from INTAKE_* environment variables."""
        _load_dotenv(dotenv_path)
        policy = PolicyConfig()
        cap = _env_int("INTAKE_FOLLOW_UP_CAP", policy.follow_up_cap)
        if cap < 0:
            raise ValueError("INTAKE_FOLLOW_UP_CAP must not be negative")
        return cls(
            depth=AnalysisDepth.from_string(
                os.environ.get("INTAKE_ANALYSIS_DEPTH"),
                default=AnalysisDepth.STANDARD,
            ),
            country=os.environ.get("INTAKE_COUNTRY", "").strip(),
            use_llm=os.environ.get("INTAKE_USE_LLM", "").strip().lower() in ("1", "true", "yes"),
            policy=replace(policy, follow_up_cap=cap),
        )
