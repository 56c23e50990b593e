"""
Interview session - drives a dialogue through the orchestrator.

Keeps the transcript, asks follow-ups before moving on and sources every
other question from the question generator.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from datetime import datetime
from typing import Optional

from .branching.engine import ConversationOrchestrator, TurnDecision
from .config import IntakeSettings
from .phases import CONVERSATION_PHASES, ConversationPhase, TERMINAL_PHASE
from .questions import QuestionGenerator

logger = logging.getLogger(__name__)

COMPLETION_MESSAGE = (
    "Thank you. I have everything I need for now, and your case summary can be prepared."
)


@dataclass(frozen=True)
class TranscriptEntry:
    """One line of the interview."""
    role: str  # "interviewer" or "user"
    content: str
    phase: ConversationPhase
    timestamp: str = field(default_factory=lambda: datetime.now().isoformat())
    is_follow_up: bool = False

    def to_dict(self) -> dict:
        return {
            "role": self.role,
            "content": self.content,
            "phase": self.phase.value,
            "timestamp": self.timestamp,
            "is_follow_up": self.is_follow_up,
        }


@dataclass(frozen=True)
class TurnResult:
    """Outcome of one answer: the engine's decision and what to ask next."""
    decision: TurnDecision
    next_question: str
    finished: bool = False

    def to_dict(self) -> dict:
        return {
            "decision": self.decision.to_dict(),
            "next_question": self.next_question,
            "finished": self.finished,
        }


def build_question_generator(settings: IntakeSettings) -> QuestionGenerator:
    """Question generator for `settings`, backed by the LLM manager when enabled."""
    if not settings.use_llm:
        return QuestionGenerator(country=settings.country)
    from .llm.manager import LLMManager, LLMManagerConfig
    manager = LLMManager(LLMManagerConfig.from_env())
    if not manager.is_available():
        logger.warning("No LLM provider available, using the question bank")
        return QuestionGenerator(country=settings.country)
    return QuestionGenerator(provider=manager, country=settings.country)


class InterviewSession:
    """
    One intake interview.

    Flow:
    1. start() returns the opening question
    2. respond(answer) returns the follow-up or the next phase question
    3. finished once the closing phase has been asked its questions and no
       follow-up is waiting for an answer
    """

    def __init__(
        self,
        settings: Optional[IntakeSettings] = None,
        generator: Optional[QuestionGenerator] = None
    ):
        self.settings = settings or IntakeSettings()
        self.generator = generator or build_question_generator(self.settings)
        self.orchestrator = ConversationOrchestrator(
            depth=self.settings.depth,
            policy=self.settings.policy
        )
        self.transcript: list[TranscriptEntry] = []
        self.current_question: str = ""
        self.follow_up_pending: bool = False
        self.started_at: Optional[str] = None

    # ------------------------------------------------------------------

    def start(self) -> str:
        """Begin the interview and return the opening question."""
        self.started_at = datetime.now().isoformat()
        self.current_question = self.generator.opening_question()
        self._record("interviewer", self.current_question)
        return self.current_question

    def respond(self, answer: str) -> TurnResult:
        """
        Process the user's answer to the current question.

        Args:
            answer: The user's answer text

        Returns:
            TurnResult with the decision and the next question to ask
        """
        if not self.current_question:
            self.start()

        self._record("user", answer or "")
        decision = self.orchestrator.process_user_response(answer, self.current_question)
        self.follow_up_pending = bool(decision.should_follow_up and decision.follow_up_question)

        if self.follow_up_pending:
            next_question = decision.follow_up_question
            is_follow_up = True
        elif self.is_finished:
            next_question = COMPLETION_MESSAGE
            is_follow_up = False
        else:
            progress = self.orchestrator.progress
            next_question = self.generator.next_question(
                decision.next_phase,
                answer,
                history=self.history(),
                gaps=self.orchestrator.information_gaps.critical,
                asked_in_phase=progress.questions_in_phase
            )
            is_follow_up = False

        self.current_question = next_question
        self._record("interviewer", next_question, is_follow_up=is_follow_up)
        return TurnResult(decision=decision, next_question=next_question, finished=self.is_finished)

    def new_case(self) -> str:
        """Discard the current interview and start over."""
        self.orchestrator.reset()
        self.transcript = []
        self.current_question = ""
        self.follow_up_pending = False
        logger.info("New case started")
        return self.start()

    # ------------------------------------------------------------------

    @property
    def is_finished(self) -> bool:
        progress = self.orchestrator.progress
        return (
            not self.follow_up_pending
            and progress.current_phase == TERMINAL_PHASE
            and progress.questions_in_phase >= CONVERSATION_PHASES[TERMINAL_PHASE].min_questions
        )

    def history(self) -> list[tuple[str, str]]:
        """(question, answer) pairs in order."""
        pairs = []
        question = None
        for entry in self.transcript:
            if entry.role == "interviewer":
                question = entry.content
            elif question is not None:
                pairs.append((question, entry.content))
                question = None
        return pairs

    def summary(self) -> dict:
        """Interview summary for the report step."""
        orchestrator = self.orchestrator
        return {
            "depth": orchestrator.depth.value,
            "country": self.settings.country,
            "started_at": self.started_at,
            "finished": self.is_finished,
            "phase_history": [p.value for p in orchestrator.progress.phase_history],
            "completeness": orchestrator.completeness,
            "information_gaps": orchestrator.information_gaps.to_dict(),
            "unresolved_gaps": [
                {"phase": g.phase.value, "reason": g.reason} for g in orchestrator.unresolved_gaps
            ],
            "metrics": orchestrator.metrics.to_dict(),
            "transcript": [entry.to_dict() for entry in self.transcript],
        }

    def _record(self, role: str, content: str, is_follow_up: bool = False):
        self.transcript.append(TranscriptEntry(
            role=role,
            content=content,
            phase=self.orchestrator.current_phase,
            is_follow_up=is_follow_up
        ))
