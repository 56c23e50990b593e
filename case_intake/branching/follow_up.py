"""
Follow-up policy.

Decides whether a clarifying question should interrupt forward progress and
builds the ranked candidates to choose it from. The number of back-to-back
follow-ups is capped so a struggling user is never interrogated endlessly;
once the cap is hit the conversation moves on and the gap is recorded by the
caller instead.
"""

from dataclasses import dataclass
from typing import List, Optional

from ..config import PolicyConfig, DEFAULT_POLICY
from ..phases import coerce_phase
from .analyzer import AnswerQualityAssessment
from .triggers import FollowUpPriority, IssueSeverity, load_phase_follow_ups


@dataclass(frozen=True)
class FollowUpQuestion:
    """A candidate clarifying question."""
    question: str
    reason: str
    priority: FollowUpPriority = FollowUpPriority.MEDIUM
    target_topic: str = ""

    def to_dict(self) -> dict:
        return {
            "question": self.question,
            "reason": self.reason,
            "priority": self.priority.value,
            "target_topic": self.target_topic,
        }


_ISSUE_PRIORITY = {
    IssueSeverity.CRITICAL: FollowUpPriority.HIGH,
    IssueSeverity.MODERATE: FollowUpPriority.MEDIUM,
}


def should_ask_follow_up_now(
    assessment: AnswerQualityAssessment,
    consecutive_follow_ups: int,
    policy: Optional[PolicyConfig] = None
) -> bool:
    """
    Whether to ask a follow-up for this answer right now.

    Never true once `consecutive_follow_ups` has reached the cap, whatever
    the quality of the answer.
    """
    policy = policy or DEFAULT_POLICY
    if consecutive_follow_ups >= policy.follow_up_cap:
        return False
    return not assessment.is_adequate


def generate_follow_up_questions(
    assessment: AnswerQualityAssessment,
    phase,
    answer: str,
    policy: Optional[PolicyConfig] = None
) -> List[FollowUpQuestion]:
    """
    Build ranked follow-up candidates for an assessed answer.

    Args:
        assessment: Quality assessment of the answer
        phase: Phase the follow-up will be asked in
        answer: The answer text
        policy: Limits the number of candidates returned

    Returns:
        Candidates, most important first. May be empty when nothing in the
        answer can be latched onto; callers must then not follow up.
    """
    policy = policy or DEFAULT_POLICY
    phase = coerce_phase(phase)
    candidates: List[FollowUpQuestion] = []

    for issue in assessment.issues:
        priority = _ISSUE_PRIORITY.get(issue.severity)
        if priority is None or not issue.suggested_follow_up:
            continue
        candidates.append(FollowUpQuestion(
            question=issue.suggested_follow_up,
            reason=issue.description,
            priority=priority,
            target_topic=issue.type.value
        ))

    if assessment.quality.is_below_adequate:
        for rule in load_phase_follow_ups(phase):
            if rule.applies(answer or ""):
                candidates.append(FollowUpQuestion(
                    question=rule.follow_up_question,
                    reason=rule.reason,
                    priority=rule.priority,
                    target_topic=rule.target_topic
                ))
                break

    candidates.sort(key=lambda c: c.priority.rank)

    seen = set()
    unique: List[FollowUpQuestion] = []
    for candidate in candidates:
        if candidate.question in seen:
            continue
        seen.add(candidate.question)
        unique.append(candidate)

    return unique[:policy.max_follow_up_candidates]
