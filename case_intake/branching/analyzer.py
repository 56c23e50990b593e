"""
Answer Quality Assessor for interview responses.

Scores a single answer against the active phase and the question it
answered, and lists the deficiencies that a follow-up question could fix.
Assessment is rule-based and deterministic: the same answer, phase and
question always produce the same result.
"""

import re
from dataclasses import dataclass, field
from typing import Optional, List, Set
from enum import Enum

from ..config import PolicyConfig, DEFAULT_POLICY
from ..phases import ConversationPhase, coerce_phase
from ..tracking import analyze_response_for_topics
from .triggers import IssueSeverity, load_phase_probes


class AnswerQuality(str, Enum):
    """Quality bucket of an answer, best first."""
    EXCELLENT = "excellent"
    GOOD = "good"
    ACCEPTABLE = "acceptable"
    POOR = "poor"
    UNCLEAR = "unclear"          # Lowest bucket

    @classmethod
    def lowest(cls) -> "AnswerQuality":
        return cls.UNCLEAR

    @property
    def is_below_adequate(self) -> bool:
        return self in (AnswerQuality.POOR, AnswerQuality.UNCLEAR)


class IssueType(str, Enum):
    """Kind of deficiency found in an answer."""
    NO_CONTENT = "no_content"           # Empty or whitespace only
    INCOMPLETE = "incomplete"           # Too short to be meaningful
    VAGUE = "vague"                     # Hedging, uncertain wording
    MISSING_DETAILS = "missing_details" # Phase-specific detail missing
    OFF_TOPIC = "off_topic"             # No overlap with the question
    CONTRADICTORY = "contradictory"     # Conflicting statements
    UNFINISHED = "unfinished"           # Trailing off ("...", "etc")


@dataclass(frozen=True)
class QualityIssue:
    """A single deficiency in an answer."""
    type: IssueType
    severity: IssueSeverity
    description: str
    suggested_follow_up: str = ""


@dataclass(frozen=True)
class AnswerQualityAssessment:
    """
    Complete assessment of one answer.

    Minor issues (such as an answer trailing off with "etc") can accompany an
    adequate assessment, so `issues` is not always empty when `is_adequate`
    is True.
    """
    quality: AnswerQuality
    score: int                                   # 0-100
    issues: tuple = ()                           # Most severe first
    needs_follow_up: bool = False
    confidence: int = 100                        # 0-100, certainty of this assessment

    @property
    def is_adequate(self) -> bool:
        return not self.needs_follow_up

    @property
    def issue_types(self) -> List[IssueType]:
        return [issue.type for issue in self.issues]

    def to_dict(self) -> dict:
        return {
            "quality": self.quality.value,
            "score": self.score,
            "needs_follow_up": self.needs_follow_up,
            "confidence": self.confidence,
            "issues": [
                {
                    "type": issue.type.value,
                    "severity": issue.severity.value,
                    "description": issue.description,
                }
                for issue in self.issues
            ],
        }


class AnswerAnalyzer:
    """
    Rule-based answer quality assessment.

    Score starts at 100 and each detected issue subtracts a policy-defined
    penalty. The final score is bucketed into an AnswerQuality.
    """

    # Hedging / uncertainty markers
    VAGUE_INDICATORS = [
        r"\bi don'?t know\b", r"\bnot sure\b", r"\bmaybe\b", r"\bi think\b",
        r"\bprobably\b", r"\bi guess\b", r"\bkind of\b", r"\bsort of\b",
        r"\bsomething like\b", r"\baround\b", r"\bapproximately\b"
    ]

    # Markers of an answer that contradicts itself
    CONTRADICTION_PATTERNS = [
        r"\bbut\b[\s\S]*\bhowever\b|\bhowever\b[\s\S]*\bbut\b",
        r"\bactually,?\s+no\b",
        r"\bor\s+maybe\s+not\b",
    ]

    # Markers of an answer that trails off
    UNFINISHED_PATTERNS = [
        r"\.\.\.\s*$", r"…\s*$", r"\betc\b", r"\band so on\b"
    ]

    # Words too common to signal topical overlap
    STOPWORDS: Set[str] = {
        "about", "after", "again", "also", "been", "before", "being", "between",
        "both", "could", "didn't", "does", "doesn't", "doing", "don't", "done",
        "each", "even", "from", "have", "having", "here", "into", "just", "know",
        "like", "made", "make", "more", "most", "much", "only", "other", "over",
        "really", "said", "same", "some", "such", "tell", "than", "that", "their",
        "them", "then", "there", "these", "they", "thing", "things", "this",
        "those", "through", "very", "want", "well", "were", "what", "when",
        "where", "which", "while", "will", "with", "would", "your", "you're",
        "yours", "please", "maybe", "sure", "think",
    }

    def __init__(self, policy: Optional[PolicyConfig] = None):
        self.policy = policy or DEFAULT_POLICY

    def assess(
        self,
        answer: str,
        phase,
        question: str = ""
    ) -> AnswerQualityAssessment:
        """
        Assess an answer.

        Args:
            answer: The user's answer text
            phase: Phase the answer was given in
            question: The question that was asked

        Returns:
            AnswerQualityAssessment with issues ordered most severe first
        """
        phase = coerce_phase(phase)
        answer = answer or ""
        question = question or ""
        stripped = answer.strip()

        if not stripped:
            return AnswerQualityAssessment(
                quality=AnswerQuality.lowest(),
                score=0,
                issues=(QualityIssue(
                    type=IssueType.NO_CONTENT,
                    severity=IssueSeverity.CRITICAL,
                    description="Answer has no content",
                    suggested_follow_up="I didn't catch that. Could you tell me about it in your own words?"
                ),),
                needs_follow_up=True,
                confidence=0
            )

        policy = self.policy
        issues: List[QualityIssue] = []
        score = 100
        lower = stripped.lower()

        # Length
        if len(stripped) < policy.min_answer_length:
            issues.append(QualityIssue(
                type=IssueType.INCOMPLETE,
                severity=IssueSeverity.CRITICAL,
                description="Answer is too short to be meaningful",
                suggested_follow_up="Could you provide more details about that?"
            ))
            score -= policy.critical_short_penalty
        elif len(stripped) < policy.short_answer_length:
            issues.append(QualityIssue(
                type=IssueType.INCOMPLETE,
                severity=IssueSeverity.MODERATE,
                description="Answer lacks sufficient detail",
                suggested_follow_up="Can you tell me more about this?"
            ))
            score -= policy.moderate_short_penalty

        # Hedging; a single marker counts when the answer is also brief
        vague_count = self._count_vague_markers(lower)
        is_brief = len(stripped) < policy.short_answer_length
        if vague_count >= policy.strong_vague_markers:
            issues.append(QualityIssue(
                type=IssueType.VAGUE,
                severity=IssueSeverity.MODERATE,
                description="Answer contains many uncertain expressions",
                suggested_follow_up="Can you be more specific about the details you do remember?"
            ))
            score -= policy.strong_vague_penalty
        elif vague_count >= policy.mild_vague_markers or (vague_count and is_brief):
            issues.append(QualityIssue(
                type=IssueType.VAGUE,
                severity=IssueSeverity.MODERATE if is_brief else IssueSeverity.MINOR,
                description="Answer shows some uncertainty",
                suggested_follow_up="What parts are you most certain about?"
            ))
            score -= policy.mild_vague_penalty

        # Phase-specific missing details
        for probe in load_phase_probes(phase):
            if probe.fires(stripped, question):
                issues.append(QualityIssue(
                    type=IssueType.MISSING_DETAILS,
                    severity=probe.severity,
                    description=probe.description,
                    suggested_follow_up=probe.follow_up_question
                ))
                score -= policy.missing_detail_penalty

        # Topical overlap with the question
        if len(stripped) >= policy.min_answer_length and self._is_off_topic(stripped, phase, question):
            issues.append(QualityIssue(
                type=IssueType.OFF_TOPIC,
                severity=IssueSeverity.MODERATE,
                description="Answer does not seem to address the question",
                suggested_follow_up=self._off_topic_follow_up(question)
            ))
            score -= policy.off_topic_penalty

        if any(re.search(p, lower) for p in self.CONTRADICTION_PATTERNS):
            issues.append(QualityIssue(
                type=IssueType.CONTRADICTORY,
                severity=IssueSeverity.MINOR,
                description="Answer may contain contradictory information",
                suggested_follow_up="Just to clarify, which of these is correct?"
            ))
            score -= policy.contradiction_penalty

        if any(re.search(p, lower) for p in self.UNFINISHED_PATTERNS):
            issues.append(QualityIssue(
                type=IssueType.UNFINISHED,
                severity=IssueSeverity.MINOR,
                description="Answer appears incomplete",
                suggested_follow_up="Can you complete that thought?"
            ))
            score -= policy.unfinished_penalty

        score = max(0, min(100, score))
        quality = self._bucket(score)
        issues.sort(key=lambda issue: issue.severity.rank)

        return AnswerQualityAssessment(
            quality=quality,
            score=score,
            issues=tuple(issues),
            needs_follow_up=self._needs_follow_up(quality, issues),
            confidence=self._assessment_confidence(stripped)
        )

    def _count_vague_markers(self, answer: str) -> int:
        return sum(1 for pattern in self.VAGUE_INDICATORS if re.search(pattern, answer))

    def _content_stems(self, text: str) -> Set[str]:
        words = re.findall(r"[a-z][a-z']+", text.lower())
        return {w[:5] for w in words if len(w) >= 4 and w not in self.STOPWORDS}

    def _is_off_topic(self, answer: str, phase: ConversationPhase, question: str) -> bool:
        """True when the answer shares nothing with the question or the phase topics."""
        question_stems = self._content_stems(question)
        if len(question_stems) < self.policy.min_overlap_words:
            return False
        if self._content_stems(answer) & question_stems:
            return False
        return not analyze_response_for_topics(answer, phase)

    @staticmethod
    def _off_topic_follow_up(question: str) -> str:
        question = question.strip()
        if not question:
            return ""
        return f"I want to make sure I understand. Coming back to my question: {question}"

    def _bucket(self, score: int) -> AnswerQuality:
        policy = self.policy
        if score >= policy.excellent_floor:
            return AnswerQuality.EXCELLENT
        if score >= policy.good_floor:
            return AnswerQuality.GOOD
        if score >= policy.acceptable_floor:
            return AnswerQuality.ACCEPTABLE
        if score >= policy.poor_floor:
            return AnswerQuality.POOR
        return AnswerQuality.UNCLEAR

    @staticmethod
    def _needs_follow_up(quality: AnswerQuality, issues: List[QualityIssue]) -> bool:
        if quality.is_below_adequate:
            return True
        if any(issue.severity == IssueSeverity.CRITICAL for issue in issues):
            return True
        # Several moderate problems together make an answer unusable
        return sum(1 for issue in issues if issue.severity == IssueSeverity.MODERATE) >= 2

    @staticmethod
    def _assessment_confidence(answer: str) -> int:
        """How much we trust this assessment."""
        word_count = len(answer.split())
        confidence = 100

        if word_count < 5:
            confidence -= 30
        elif word_count < 10:
            confidence -= 15

        # Very long answers are harder to analyze
        if word_count > 200:
            confidence -= 10

        # Answers that are mostly questions back to us
        if answer.count("?") > 2:
            confidence -= 20

        return max(0, min(100, confidence))


_DEFAULT_ANALYZER = AnswerAnalyzer()


def assess_answer_quality(
    answer: str,
    phase,
    question: str = "",
    policy: Optional[PolicyConfig] = None
) -> AnswerQualityAssessment:
    """Assess an answer with the default (or given) policy."""
    analyzer = AnswerAnalyzer(policy) if policy is not None else _DEFAULT_ANALYZER
    return analyzer.assess(answer, phase, question)
