"""
Conversation Orchestrator - per-turn decision logic for the intake interview.

For every user answer the orchestrator:
1. Assesses the answer's quality
2. Folds it into the information tracker
3. Decides whether the current phase is exhausted
4. Decides whether a follow-up should be asked before moving on

and returns a TurnDecision for the dialogue driver to act on. A follow-up,
when present, is meant to be asked before the next phase question.
"""

import logging
import threading
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Callable, List, Optional, Tuple

from ..config import AnalysisDepth, PolicyConfig, DEFAULT_POLICY
from ..phases import (
    ConversationPhase,
    PhaseProgress,
    get_next_phase,
    is_terminal,
    should_transition_phase,
)
from ..tracking import (
    InformationGaps,
    InformationTracker,
    initialize_tracker,
    missing_topics,
    update_tracker,
)
from .analyzer import AnswerAnalyzer, AnswerQualityAssessment
from .follow_up import (
    FollowUpQuestion,
    generate_follow_up_questions,
    should_ask_follow_up_now,
)
from .metrics import QualityMetrics, initialize_quality_metrics, update_quality_metrics

logger = logging.getLogger(__name__)

PhaseListener = Callable[[ConversationPhase, ConversationPhase], None]


@dataclass(frozen=True)
class PhaseTransition:
    """A recorded phase change."""
    from_phase: ConversationPhase
    to_phase: ConversationPhase
    reason: str
    timestamp: str = field(default_factory=lambda: datetime.now(timezone.utc).isoformat())

    def to_dict(self) -> dict:
        return {
            "from": self.from_phase.value,
            "to": self.to_phase.value,
            "reason": self.reason,
            "timestamp": self.timestamp,
        }


@dataclass(frozen=True)
class UnresolvedGap:
    """A follow-up that was suppressed because the cap had been reached."""
    phase: ConversationPhase
    reason: str


@dataclass(frozen=True)
class TurnDecision:
    """What the dialogue driver should do after an answer."""
    should_follow_up: bool
    follow_up_question: Optional[str]
    next_phase: ConversationPhase
    previous_phase: ConversationPhase
    transitioned: bool = False
    is_complete: bool = False
    follow_up_reason: str = ""
    assessment: Optional[AnswerQualityAssessment] = None

    def to_dict(self) -> dict:
        return {
            "should_follow_up": self.should_follow_up,
            "follow_up_question": self.follow_up_question,
            "follow_up_reason": self.follow_up_reason,
            "next_phase": self.next_phase.value,
            "previous_phase": self.previous_phase.value,
            "transitioned": self.transitioned,
            "is_complete": self.is_complete,
            "assessment": self.assessment.to_dict() if self.assessment else None,
        }


@dataclass(frozen=True)
class ConversationState:
    """Everything the orchestrator owns for one conversation."""
    progress: PhaseProgress = field(default_factory=PhaseProgress.start)
    tracker: InformationTracker = field(default_factory=initialize_tracker)
    metrics: QualityMetrics = field(default_factory=initialize_quality_metrics)
    consecutive_follow_ups: int = 0
    last_assessment: Optional[AnswerQualityAssessment] = None
    transitions: Tuple[PhaseTransition, ...] = ()
    unresolved_gaps: Tuple[UnresolvedGap, ...] = ()


class ConversationOrchestrator:
    """
    Drives one interview conversation through its phases.

    State is replaced, never mutated in place, so a snapshot taken between
    turns stays valid. A lock serializes turns and resets.
    """

    def __init__(
        self,
        depth=AnalysisDepth.STANDARD,
        policy: Optional[PolicyConfig] = None,
        on_phase_change: Optional[PhaseListener] = None
    ):
        """
        Initialize the orchestrator.

        Args:
            depth: Analysis depth selecting the phase sequence
            policy: Threshold configuration
            on_phase_change: Optional listener called with (from_phase, to_phase)
        """
        self.depth = AnalysisDepth.from_string(depth)
        self.policy = policy or DEFAULT_POLICY
        self.analyzer = AnswerAnalyzer(self.policy)
        self._listeners: List[PhaseListener] = []
        if on_phase_change is not None:
            self._listeners.append(on_phase_change)
        self._lock = threading.Lock()
        self._state = ConversationState()

    # ------------------------------------------------------------------
    # Listeners
    # ------------------------------------------------------------------

    def add_phase_listener(self, callback: PhaseListener):
        """Call `callback(from_phase, to_phase)` after each turn that changes phase."""
        if callback not in self._listeners:
            self._listeners.append(callback)

    def remove_phase_listener(self, callback: PhaseListener):
        if callback in self._listeners:
            self._listeners.remove(callback)

    def _notify_phase_change(self, from_phase: ConversationPhase, to_phase: ConversationPhase):
        for listener in list(self._listeners):
            try:
                listener(from_phase, to_phase)
            except Exception:
                logger.exception(
                    "Phase listener failed for %s -> %s", from_phase.value, to_phase.value
                )

    # ------------------------------------------------------------------
    # Turn processing
    # ------------------------------------------------------------------

    def process_user_response(self, answer: str, question: str = "") -> TurnDecision:
        """
        Process one user answer.

        Args:
            answer: The user's answer text
            question: The question the answer responds to

        Returns:
            TurnDecision with the follow-up (if any) and the governing phase
        """
        answer = answer or ""
        with self._lock:
            state = self._state
            pre_progress = state.progress
            answered_phase = pre_progress.current_phase

            assessment = self.analyzer.assess(answer, answered_phase, question)
            logger.debug(
                "Answer in %s assessed as %s (score %d)",
                answered_phase.value, assessment.quality.value, assessment.score
            )

            tracker = update_tracker(state.tracker, answered_phase, answer)
            progress = pre_progress.with_question_asked()

            # Transition is judged on progress before this answer was counted
            transitions = state.transitions
            transitioned = False
            has_new_information = len(answer) > self.policy.new_information_length
            if should_transition_phase(pre_progress, len(answer), has_new_information, self.policy):
                next_phase = get_next_phase(answered_phase, self.depth)
                if next_phase is not None:
                    progress = progress.advanced_to(next_phase)
                    transition = PhaseTransition(
                        from_phase=answered_phase,
                        to_phase=next_phase,
                        reason=self._transition_reason(pre_progress, len(answer), has_new_information)
                    )
                    transitions = transitions + (transition,)
                    transitioned = True
                    logger.info(
                        "Phase transition %s -> %s (%s)",
                        answered_phase.value, next_phase.value, transition.reason
                    )

            current_phase = progress.current_phase
            follow_up, consecutive, gaps = self._decide_follow_up(
                state, assessment, answered_phase, current_phase, answer, transitioned
            )

            progress = progress.with_topics(
                tracker.covered_topics(current_phase),
                missing_topics(tracker, current_phase)
            )

            self._state = ConversationState(
                progress=progress,
                tracker=tracker,
                metrics=update_quality_metrics(state.metrics, assessment, follow_up is not None),
                consecutive_follow_ups=consecutive,
                last_assessment=assessment,
                transitions=transitions,
                unresolved_gaps=gaps,
            )

            decision = TurnDecision(
                should_follow_up=follow_up is not None,
                follow_up_question=follow_up.question if follow_up else None,
                next_phase=current_phase,
                previous_phase=answered_phase,
                transitioned=transitioned,
                is_complete=follow_up is None and is_terminal(current_phase),
                follow_up_reason=follow_up.reason if follow_up else "",
                assessment=assessment,
            )

        # Listeners run after the lock is released and see the committed state
        if decision.transitioned:
            self._notify_phase_change(decision.previous_phase, decision.next_phase)
        return decision

    def _decide_follow_up(
        self,
        state: ConversationState,
        assessment: AnswerQualityAssessment,
        answered_phase: ConversationPhase,
        current_phase: ConversationPhase,
        answer: str,
        transitioned: bool
    ) -> Tuple[Optional[FollowUpQuestion], int, Tuple[UnresolvedGap, ...]]:
        """
        Pick the follow-up for this turn and the new consecutive counter.

        The counter grows with each follow-up and drops to 0 on a turn that
        needs none. When the cap suppresses a needed follow-up the counter
        stays at the cap until the phase advances, and the gap is recorded.
        """
        consecutive = state.consecutive_follow_ups
        gaps = state.unresolved_gaps

        if should_ask_follow_up_now(assessment, consecutive, self.policy):
            candidates = generate_follow_up_questions(assessment, current_phase, answer, self.policy)
            if candidates:
                logger.info(
                    "Follow-up in %s (%d in a row): %s",
                    current_phase.value, consecutive + 1, candidates[0].reason
                )
                return candidates[0], consecutive + 1, gaps
            return None, 0, gaps

        if assessment.is_adequate:
            return None, 0, gaps

        # Needed but capped
        candidates = generate_follow_up_questions(assessment, current_phase, answer, self.policy)
        reasons = [c.reason for c in candidates] or [i.description for i in assessment.issues[:1]]
        gaps = gaps + tuple(UnresolvedGap(phase=answered_phase, reason=r) for r in reasons)
        logger.info(
            "Follow-up cap reached in %s; recording %d unresolved gap(s)",
            answered_phase.value, len(reasons)
        )
        return None, (0 if transitioned else consecutive), gaps

    def _transition_reason(
        self,
        pre_progress: PhaseProgress,
        answer_length: int,
        has_new_information: bool
    ) -> str:
        asked = pre_progress.questions_in_phase
        minimum = pre_progress.phase_info.min_questions
        if answer_length < self.policy.substantive_answer_length and asked >= minimum + self.policy.extra_questions_on_short:
            return "Short answers after extra questions"
        if not has_new_information and asked >= minimum + self.policy.extra_questions_without_new_info:
            return "No new information"
        return "Question limit for phase reached"

    # ------------------------------------------------------------------
    # State access
    # ------------------------------------------------------------------

    def reset(self):
        """Start a new case. Listeners are kept."""
        with self._lock:
            self._state = ConversationState()
        logger.info("Conversation reset")

    @property
    def state(self) -> ConversationState:
        return self._state

    @property
    def current_phase(self) -> ConversationPhase:
        return self._state.progress.current_phase

    @property
    def progress(self) -> PhaseProgress:
        return self._state.progress

    @property
    def tracker(self) -> InformationTracker:
        return self._state.tracker

    @property
    def metrics(self) -> QualityMetrics:
        return self._state.metrics

    @property
    def consecutive_follow_ups(self) -> int:
        return self._state.consecutive_follow_ups

    @property
    def last_assessment(self) -> Optional[AnswerQualityAssessment]:
        return self._state.last_assessment

    @property
    def completeness(self) -> int:
        return self._state.tracker.completeness

    @property
    def information_gaps(self) -> InformationGaps:
        return self._state.tracker.prioritized_gaps

    @property
    def transitions(self) -> Tuple[PhaseTransition, ...]:
        return self._state.transitions

    @property
    def unresolved_gaps(self) -> Tuple[UnresolvedGap, ...]:
        return self._state.unresolved_gaps

    @property
    def is_complete(self) -> bool:
        return is_terminal(self.current_phase)

    def snapshot(self) -> dict:
        """JSON-safe view of the conversation state."""
        state = self._state
        return {
            "depth": self.depth.value,
            "progress": state.progress.to_dict(),
            "completeness": state.tracker.completeness,
            "information_gaps": state.tracker.prioritized_gaps.to_dict(),
            "phase_scores": {p.value: s for p, s in state.tracker.phase_scores.items()},
            "metrics": state.metrics.to_dict(),
            "consecutive_follow_ups": state.consecutive_follow_ups,
            "last_assessment": state.last_assessment.to_dict() if state.last_assessment else None,
            "transitions": [t.to_dict() for t in state.transitions],
            "unresolved_gaps": [
                {"phase": g.phase.value, "reason": g.reason} for g in state.unresolved_gaps
            ],
            "is_complete": self.is_complete,
        }
