"""
Conversation phases for the case intake interview.

Interview Flow (standard / thorough):
    opening → timeline → details → legal → evidence → impact → closing

Interview Flow (quick):
    opening → timeline → details → closing

Phases only ever move forward. Once `closing` is reached the interview is
complete and no further transition happens.
"""

from __future__ import annotations

from dataclasses import dataclass, field, replace
from enum import Enum
from typing import Optional

from .config import AnalysisDepth, PolicyConfig, DEFAULT_POLICY
from .errors import InvalidPhase


class ConversationPhase(str, Enum):
    """Interview phases, in canonical order."""
    OPENING = "opening"
    TIMELINE = "timeline"
    DETAILS = "details"
    LEGAL = "legal"
    EVIDENCE = "evidence"
    IMPACT = "impact"
    CLOSING = "closing"


@dataclass(frozen=True)
class PhaseInfo:
    """Static description of a phase."""
    phase: ConversationPhase
    name: str
    description: str
    objectives: tuple[str, ...]
    min_questions: int
    completion_criteria: tuple[str, ...]


CONVERSATION_PHASES: dict[ConversationPhase, PhaseInfo] = {
    ConversationPhase.OPENING: PhaseInfo(
        phase=ConversationPhase.OPENING,
        name="Opening",
        description="Let the user tell their story freely",
        objectives=(
            "Understand the general situation",
            "Identify the main issue",
            "Build rapport and trust",
            "Get an overview of what happened",
        ),
        min_questions=2,
        completion_criteria=(
            "User has described the main issue",
            "Basic context is established",
            "Key parties are mentioned",
        ),
    ),
    ConversationPhase.TIMELINE: PhaseInfo(
        phase=ConversationPhase.TIMELINE,
        name="Timeline",
        description="Build chronological understanding",
        objectives=(
            "Establish when events occurred",
            "Understand the sequence of events",
            "Identify key dates and deadlines",
            "Map the progression of the situation",
        ),
        min_questions=3,
        completion_criteria=(
            "Start date is known",
            "Key events are dated",
            "Sequence is clear",
        ),
    ),
    ConversationPhase.DETAILS: PhaseInfo(
        phase=ConversationPhase.DETAILS,
        name="Details",
        description="Deep dive into specifics",
        objectives=(
            "Identify all parties involved",
            "Understand locations and settings",
            "Clarify how things happened",
            "Explore motivations and context",
        ),
        min_questions=4,
        completion_criteria=(
            "All parties are identified",
            "Locations are specified",
            "Methods and actions are clear",
        ),
    ),
    ConversationPhase.LEGAL: PhaseInfo(
        phase=ConversationPhase.LEGAL,
        name="Legal Aspects",
        description="Identify legal issues and frameworks",
        objectives=(
            "Identify contracts or agreements",
            "Understand legal obligations",
            "Recognize potential violations",
            "Determine applicable laws",
        ),
        min_questions=3,
        completion_criteria=(
            "Legal relationships are identified",
            "Relevant laws are mentioned",
            "Obligations are understood",
        ),
    ),
    ConversationPhase.EVIDENCE: PhaseInfo(
        phase=ConversationPhase.EVIDENCE,
        name="Evidence",
        description="Gather documentation and witnesses",
        objectives=(
            "Identify written documentation",
            "Find witnesses",
            "Locate communication records",
            "Discover physical evidence",
        ),
        min_questions=3,
        completion_criteria=(
            "Documents are identified",
            "Witnesses are named",
            "Communication records are noted",
        ),
    ),
    ConversationPhase.IMPACT: PhaseInfo(
        phase=ConversationPhase.IMPACT,
        name="Impact & Consequences",
        description="Assess damages and effects",
        objectives=(
            "Quantify financial losses",
            "Assess emotional impact",
            "Identify ongoing consequences",
            "Understand future implications",
        ),
        min_questions=2,
        completion_criteria=(
            "Damages are quantified",
            "Impact is described",
            "Consequences are clear",
        ),
    ),
    ConversationPhase.CLOSING: PhaseInfo(
        phase=ConversationPhase.CLOSING,
        name="Closing",
        description="Fill gaps and summarize",
        objectives=(
            "Address any missing information",
            "Clarify ambiguities",
            "Confirm key facts",
            "Prepare for report generation",
        ),
        min_questions=1,
        completion_criteria=(
            "No major gaps remain",
            "User confirms understanding",
            "Ready for report",
        ),
    ),
}

FULL_SEQUENCE: tuple[ConversationPhase, ...] = tuple(ConversationPhase)

QUICK_SEQUENCE: tuple[ConversationPhase, ...] = (
    ConversationPhase.OPENING,
    ConversationPhase.TIMELINE,
    ConversationPhase.DETAILS,
    ConversationPhase.CLOSING,
)

TERMINAL_PHASE = ConversationPhase.CLOSING


def phase_sequence(depth: AnalysisDepth | str = AnalysisDepth.STANDARD) -> tuple[ConversationPhase, ...]:
    """Ordered phases governing transitions for the given depth."""
    if AnalysisDepth.from_string(depth) == AnalysisDepth.QUICK:
        return QUICK_SEQUENCE
    return FULL_SEQUENCE


def coerce_phase(value: ConversationPhase | str) -> ConversationPhase:
    """Return the phase for `value`, raising InvalidPhase if unrecognized."""
    if isinstance(value, ConversationPhase):
        return value
    if isinstance(value, str):
        try:
            return ConversationPhase(value.strip().lower())
        except ValueError:
            pass
    raise InvalidPhase(value)


def phase_index(phase: ConversationPhase | str) -> int:
    """Position of a phase in the canonical (full) ordering."""
    return FULL_SEQUENCE.index(coerce_phase(phase))


def is_terminal(phase: ConversationPhase | str) -> bool:
    return coerce_phase(phase) == TERMINAL_PHASE


def get_next_phase(
    current: ConversationPhase | str,
    depth: AnalysisDepth | str = AnalysisDepth.STANDARD,
) -> Optional[ConversationPhase]:
    """
    Get the phase following `current` in the active sequence.

    Returns None for the terminal phase. Raises InvalidPhase when `current`
    is not a recognized phase or is not part of the active sequence.
    """
    phase = coerce_phase(current)
    sequence = phase_sequence(depth)
    if phase not in sequence:
        raise InvalidPhase(
            phase,
            f"Phase {phase.value!r} is not part of the {AnalysisDepth.from_string(depth).value} sequence",
        )
    index = sequence.index(phase)
    if index == len(sequence) - 1:
        return None
    return sequence[index + 1]


@dataclass(frozen=True)
class PhaseProgress:
    """Progress through the phases for one conversation."""
    current_phase: ConversationPhase = ConversationPhase.OPENING
    questions_in_phase: int = 0
    covered_topics: frozenset[str] = field(default_factory=frozenset)
    missing_info: tuple[str, ...] = ()
    phase_history: tuple[ConversationPhase, ...] = (ConversationPhase.OPENING,)

    @classmethod
    def start(cls) -> PhaseProgress:
        return cls()

    @property
    def phase_info(self) -> PhaseInfo:
        return CONVERSATION_PHASES[self.current_phase]

    def with_question_asked(self) -> PhaseProgress:
        return replace(self, questions_in_phase=self.questions_in_phase + 1)

    def with_topics(self, covered, missing) -> PhaseProgress:
        """Merge newly covered topics; covered topics are never dropped within a phase."""
        return replace(
            self,
            covered_topics=self.covered_topics | frozenset(covered),
            missing_info=tuple(missing),
        )

    def advanced_to(self, phase: ConversationPhase | str) -> PhaseProgress:
        """Enter `phase`, resetting phase-scoped counters and topics."""
        target = coerce_phase(phase)
        if phase_index(target) <= phase_index(self.current_phase):
            raise InvalidPhase(
                target,
                f"Cannot move from {self.current_phase.value!r} back to {target.value!r}",
            )
        return PhaseProgress(
            current_phase=target,
            questions_in_phase=0,
            covered_topics=frozenset(),
            missing_info=(),
            phase_history=self.phase_history + (target,),
        )

    def to_dict(self) -> dict:
        return {
            "current_phase": self.current_phase.value,
            "questions_in_phase": self.questions_in_phase,
            "covered_topics": sorted(self.covered_topics),
            "missing_info": list(self.missing_info),
            "phase_history": [p.value for p in self.phase_history],
        }


def should_transition_phase(
    progress: PhaseProgress,
    answer_length: int,
    has_new_information: bool,
    policy: PolicyConfig = DEFAULT_POLICY,
) -> bool:
    """
    Decide whether the interview should leave the current phase.

    Args:
        progress: Phase progress before the latest answer was counted
        answer_length: Length of the latest answer in characters
        has_new_information: Whether the answer plausibly added new facts
        policy: Threshold configuration

    Returns:
        True when the phase's objectives look exhausted
    """
    if is_terminal(progress.current_phase):
        return False

    min_questions = CONVERSATION_PHASES[progress.current_phase].min_questions
    asked = progress.questions_in_phase

    if asked < min_questions:
        return False

    # Very short answers after extra probing suggest nothing more to tell
    if answer_length < policy.substantive_answer_length and asked >= min_questions + policy.extra_questions_on_short:
        return True

    if not has_new_information and asked >= min_questions + policy.extra_questions_without_new_info:
        return True

    # Hard ceiling per phase
    if asked >= min_questions + policy.max_extra_questions:
        return True

    return False
