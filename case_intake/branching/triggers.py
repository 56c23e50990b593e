"""
Phase-specific rules for answer assessment and follow-up probing.

Each phase has:
- Probes that detect missing details for a given kind of question
  (e.g. a "when" question answered without any date)
- Follow-up rules that supply a phase-specific clarifying question when an
  answer is poor overall
"""

import re
from dataclasses import dataclass
from typing import Dict, List, Tuple
from enum import Enum

from ..phases import ConversationPhase, coerce_phase


class IssueSeverity(str, Enum):
    """How badly an issue undermines an answer."""
    CRITICAL = "critical"
    MODERATE = "moderate"
    MINOR = "minor"

    @property
    def rank(self) -> int:
        return {"critical": 0, "moderate": 1, "minor": 2}[self.value]


class FollowUpPriority(str, Enum):
    """Priority of a candidate follow-up question."""
    HIGH = "high"
    MEDIUM = "medium"
    LOW = "low"

    @property
    def rank(self) -> int:
        return {"high": 0, "medium": 1, "low": 2}[self.value]


@dataclass(frozen=True)
class PhaseProbe:
    """Detects a missing detail for a specific kind of question."""
    id: str
    phase: ConversationPhase
    question_pattern: str         # Fires only for questions matching this
    evidence_pattern: str         # Answer satisfies the probe if this matches
    severity: IssueSeverity
    description: str
    follow_up_question: str
    waiver_pattern: str = ""      # Answer matching this is an acceptable "no"
    max_answer_length: int = 0    # Longer answers are given the benefit of the doubt
    case_sensitive: bool = False

    def fires(self, answer: str, question: str) -> bool:
        if not re.search(self.question_pattern, question, re.IGNORECASE):
            return False
        flags = 0 if self.case_sensitive else re.IGNORECASE
        if re.search(self.evidence_pattern, answer, flags):
            return False
        if self.waiver_pattern and re.search(self.waiver_pattern, answer, re.IGNORECASE):
            return False
        if self.max_answer_length and len(answer) >= self.max_answer_length:
            return False
        return True


@dataclass(frozen=True)
class PhaseFollowUpRule:
    """Phase-specific clarifying question for a poor answer."""
    id: str
    phase: ConversationPhase
    trigger_type: str   # "short", "missing" or "keyword"
    trigger_value: str  # Length threshold or regex
    follow_up_question: str
    reason: str
    priority: FollowUpPriority
    target_topic: str

    def applies(self, answer: str) -> bool:
        if self.trigger_type == "short":
            return len(answer.strip()) < int(self.trigger_value)
        if self.trigger_type == "missing":
            return re.search(self.trigger_value, answer, re.IGNORECASE) is None
        if self.trigger_type == "keyword":
            return re.search(self.trigger_value, answer, re.IGNORECASE) is not None
        raise ValueError(f"Unknown trigger type: {self.trigger_type}")


_DATE_EVIDENCE = (
    r"\d{4}|\d{1,2}/\d{1,2}|january|february|march|april|may|june|july|august|"
    r"september|october|november|december|last\s+(?:year|month|week)|this\s+year|ago|yesterday"
)
_AMOUNT_EVIDENCE = (
    r"[$€£]|\d+\s*(?:dollars?|euros?|pounds?|kronor|kr|sek|usd|eur|gbp)\b"
)


# =============================================================================
# MISSING-DETAIL PROBES
# =============================================================================
PHASE_PROBES: Dict[ConversationPhase, Tuple[PhaseProbe, ...]] = {
    ConversationPhase.TIMELINE: (
        PhaseProbe(
            id="tl_missing_date",
            phase=ConversationPhase.TIMELINE,
            question_pattern=r"\bwhen\b|\bdates?\b",
            evidence_pattern=_DATE_EVIDENCE,
            severity=IssueSeverity.CRITICAL,
            description="No specific date or timeframe provided",
            follow_up_question="Can you remember approximately when this happened? Even a rough timeframe would help.",
        ),
    ),
    ConversationPhase.DETAILS: (
        PhaseProbe(
            id="dt_missing_name",
            phase=ConversationPhase.DETAILS,
            question_pattern=r"\bwho\b|\bnames?\b",
            evidence_pattern=r"\b[A-Z][a-z]+ [A-Z][a-z]+\b",
            severity=IssueSeverity.MODERATE,
            description="No specific names mentioned",
            follow_up_question="Do you know the full name of the person involved?",
            max_answer_length=50,
            case_sensitive=True,
        ),
        PhaseProbe(
            id="dt_missing_location",
            phase=ConversationPhase.DETAILS,
            question_pattern=r"\bwhere\b|\blocation\b",
            evidence_pattern=r"\b(?:at|in|on|street|road|building|office|address|city|town|home|house|apartment)\b",
            severity=IssueSeverity.MODERATE,
            description="No specific location mentioned",
            follow_up_question="Where exactly did this take place?",
        ),
    ),
    ConversationPhase.LEGAL: (
        PhaseProbe(
            id="lg_missing_agreement",
            phase=ConversationPhase.LEGAL,
            question_pattern=r"\bcontract\b|\bagreement\b",
            evidence_pattern=r"\b(?:contract|agreement|signed|terms|clause|written|lease)\b",
            severity=IssueSeverity.CRITICAL,
            description="No details about legal agreements",
            follow_up_question="Was there any written agreement or contract? Even a verbal agreement?",
            max_answer_length=40,
        ),
    ),
    ConversationPhase.EVIDENCE: (
        PhaseProbe(
            id="ev_missing_documents",
            phase=ConversationPhase.EVIDENCE,
            question_pattern=r"\bdocument|\bevidence\b",
            evidence_pattern=r"\b(?:documents?|emails?|texts?|messages?|photos?|videos?|recordings?|receipts?|letters?)\b",
            severity=IssueSeverity.MODERATE,
            description="No specific evidence mentioned",
            follow_up_question="Do you have any emails, messages, or documents related to this?",
            waiver_pattern=r"\bno\b",
        ),
    ),
    ConversationPhase.IMPACT: (
        PhaseProbe(
            id="im_missing_amount",
            phase=ConversationPhase.IMPACT,
            question_pattern=r"\bfinancial|\bcost|\bmoney\b",
            evidence_pattern=_AMOUNT_EVIDENCE,
            severity=IssueSeverity.MODERATE,
            description="No specific financial amount mentioned",
            follow_up_question="Can you estimate the financial impact, even roughly?",
            waiver_pattern=r"\bno\b|\bnothing\b",
        ),
    ),
}


# =============================================================================
# PHASE FOLLOW-UPS FOR POOR ANSWERS
# =============================================================================
PHASE_FOLLOW_UPS: Dict[ConversationPhase, Tuple[PhaseFollowUpRule, ...]] = {
    ConversationPhase.OPENING: (
        PhaseFollowUpRule(
            id="op_brief",
            phase=ConversationPhase.OPENING,
            trigger_type="short",
            trigger_value="50",
            follow_up_question="Can you tell me more about what happened? Take your time and share as much detail as you remember.",
            reason="Initial answer too brief",
            priority=FollowUpPriority.HIGH,
            target_topic="main_issue",
        ),
    ),
    ConversationPhase.TIMELINE: (
        PhaseFollowUpRule(
            id="tl_no_timeframe",
            phase=ConversationPhase.TIMELINE,
            trigger_type="missing",
            trigger_value=r"\d",
            follow_up_question=(
                "Even if you don't remember the exact date, can you recall approximately when this started? "
                "For example, was it this year, last year, or longer ago?"
            ),
            reason="No timeframe provided",
            priority=FollowUpPriority.HIGH,
            target_topic="dates",
        ),
    ),
    ConversationPhase.DETAILS: (
        PhaseFollowUpRule(
            id="dt_brief",
            phase=ConversationPhase.DETAILS,
            trigger_type="short",
            trigger_value="40",
            follow_up_question="Can you describe this in more detail? What exactly happened, and who was involved?",
            reason="Insufficient detail provided",
            priority=FollowUpPriority.MEDIUM,
            target_topic="specifics",
        ),
    ),
    ConversationPhase.LEGAL: (
        PhaseFollowUpRule(
            id="lg_no_agreement",
            phase=ConversationPhase.LEGAL,
            trigger_type="missing",
            trigger_value=r"\b(?:contract|agreement|agreed|signed|terms|lease|promised)\b",
            follow_up_question="Was anything agreed with the other party, in writing, by email or verbally?",
            reason="No agreement or obligation described",
            priority=FollowUpPriority.MEDIUM,
            target_topic="agreements",
        ),
    ),
    ConversationPhase.EVIDENCE: (
        PhaseFollowUpRule(
            id="ev_no_documents",
            phase=ConversationPhase.EVIDENCE,
            trigger_type="keyword",
            trigger_value=r"\bno\b|don'?t\s+have",
            follow_up_question="Are there any witnesses who saw what happened, or anyone you told about this at the time?",
            reason="No documentation - checking for witnesses",
            priority=FollowUpPriority.MEDIUM,
            target_topic="witnesses",
        ),
    ),
    ConversationPhase.IMPACT: (
        PhaseFollowUpRule(
            id="im_no_amount",
            phase=ConversationPhase.IMPACT,
            trigger_type="missing",
            trigger_value=_AMOUNT_EVIDENCE,
            follow_up_question="Roughly how much has this cost you so far, including any lost income?",
            reason="Financial impact not quantified",
            priority=FollowUpPriority.MEDIUM,
            target_topic="financial_loss",
        ),
    ),
    ConversationPhase.CLOSING: (),
}


def load_phase_probes(phase) -> Tuple[PhaseProbe, ...]:
    """Load missing-detail probes for a phase."""
    return PHASE_PROBES.get(coerce_phase(phase), ())


def load_phase_follow_ups(phase) -> Tuple[PhaseFollowUpRule, ...]:
    """Load poor-answer follow-up rules for a phase."""
    return PHASE_FOLLOW_UPS.get(coerce_phase(phase), ())


def get_all_probes() -> List[PhaseProbe]:
    return [probe for probes in PHASE_PROBES.values() for probe in probes]
