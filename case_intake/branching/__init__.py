"""
Answer assessment and turn-by-turn flow control for the intake interview.

This package provides:
- Answer quality assessment
- Phase-specific probes and follow-up rules
- Follow-up policy with a back-to-back cap
- The conversation orchestrator
"""

from .analyzer import AnswerAnalyzer, AnswerQuality, AnswerQualityAssessment, assess_answer_quality
from .triggers import PhaseProbe, PhaseFollowUpRule, load_phase_probes, load_phase_follow_ups
from .follow_up import FollowUpQuestion, should_ask_follow_up_now, generate_follow_up_questions
from .metrics import QualityMetrics, initialize_quality_metrics, update_quality_metrics
from .engine import ConversationOrchestrator, TurnDecision, PhaseTransition

__all__ = [
    "AnswerAnalyzer",
    "AnswerQuality",
    "AnswerQualityAssessment",
    "assess_answer_quality",
    "PhaseProbe",
    "PhaseFollowUpRule",
    "load_phase_probes",
    "load_phase_follow_ups",
    "FollowUpQuestion",
    "should_ask_follow_up_now",
    "generate_follow_up_questions",
    "QualityMetrics",
    "initialize_quality_metrics",
    "update_quality_metrics",
    "ConversationOrchestrator",
    "TurnDecision",
    "PhaseTransition"
]
