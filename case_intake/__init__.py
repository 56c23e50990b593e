"""
Case intake interview engine.

Decides, after each answer in a legal intake interview, whether to move to
the next topical phase and whether to ask a clarifying follow-up first.
"""

from .config import AnalysisDepth, IntakeSettings, PolicyConfig
from .errors import CaseIntakeError, GenerationError, InvalidPhase
from .phases import ConversationPhase, PhaseProgress, get_next_phase, should_transition_phase
from .tracking import InformationTracker, initialize_tracker, update_tracker
from .branching import ConversationOrchestrator, TurnDecision, assess_answer_quality
from .session import InterviewSession

__all__ = [
    "AnalysisDepth",
    "IntakeSettings",
    "PolicyConfig",
    "CaseIntakeError",
    "GenerationError",
    "InvalidPhase",
    "ConversationPhase",
    "PhaseProgress",
    "get_next_phase",
    "should_transition_phase",
    "InformationTracker",
    "initialize_tracker",
    "update_tracker",
    "ConversationOrchestrator",
    "TurnDecision",
    "assess_answer_quality",
    "InterviewSession"
]
