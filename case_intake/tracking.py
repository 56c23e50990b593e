"""
Information tracking for the case intake interview.

Keeps an append-only record of which case topics have been covered in each
phase and derives a completeness estimate for progress display. Coverage is
detected heuristically from a declarative topic catalog; once a topic is
covered it stays covered, and its confidence only ever rises.
"""

from __future__ import annotations

import re
from dataclasses import dataclass, field, replace
from enum import Enum
from typing import Optional

from .phases import ConversationPhase, FULL_SEQUENCE, coerce_phase


class TopicConfidence(str, Enum):
    """How well a topic has been covered."""
    NONE = "none"
    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"

    @property
    def rank(self) -> int:
        return _CONFIDENCE_RANK[self]


_CONFIDENCE_RANK = {
    TopicConfidence.NONE: 0,
    TopicConfidence.LOW: 1,
    TopicConfidence.MEDIUM: 2,
    TopicConfidence.HIGH: 3,
}


@dataclass(frozen=True)
class TopicRule:
    """A single requirement in the topic catalog."""
    key: str
    label: str
    pattern: str = ""            # Regex signalling the topic was addressed
    min_length: int = 0          # Alternatively: any answer at least this long
    required: bool = True
    case_sensitive: bool = False

    def matches(self, text: str) -> bool:
        if self.min_length and len(text.strip()) > self.min_length:
            return True
        if not self.pattern:
            return False
        flags = 0 if self.case_sensitive else re.IGNORECASE
        return re.search(self.pattern, text, flags) is not None


_MONTHS = r"january|february|march|april|may|june|july|august|september|october|november|december"
_CURRENCY_AMOUNT = (
    r"(?:[$€£]\s?\d)"
    r"|(?:\d[\d,.]*\s*(?:kr|sek|usd|eur|gbp|dollars?|euros?|pounds?|kronor)\b)"
)

# =============================================================================
# TOPIC CATALOG - what we want to learn in each phase
# =============================================================================
TOPIC_CATALOG: dict[ConversationPhase, tuple[TopicRule, ...]] = {
    ConversationPhase.OPENING: (
        TopicRule(
            "mainIssue", "Main Issue",
            pattern=r"\b(?:fired|dismiss\w*|evict\w*|deposit|rent|contract|accident|injur\w*|owe[sd]?|"
                    r"debt|divorce|custody|harass\w*|discriminat\w*|scam\w*|fraud|damage\w*|refund|"
                    r"salary|wages|sued|lawsuit|insurance|stole\w*|theft|assault\w*)\b",
            min_length=100,
        ),
        TopicRule(
            "involvedParties", "Involved Parties",
            pattern=r"\b(?:he|she|they|company|person|employer|landlord|boss|manager|"
                    r"neighbou?r|tenant|seller|buyer|insurer|bank|police|husband|wife|partner)\b",
        ),
        TopicRule("basicContext", "Basic Context", min_length=50),
    ),
    ConversationPhase.TIMELINE: (
        TopicRule(
            "startDate", "Start Date",
            pattern=rf"\b(?:{_MONTHS}|\d{{4}}|\d{{1,2}}/\d{{1,2}}|last\s+(?:year|month|week)|this\s+year|ago|yesterday)\b",
        ),
        TopicRule("keyEvents", "Key Events", pattern=r"\b(?:date|when|time|happened|occurred|day)\b"),
        TopicRule(
            "eventSequence", "Event Sequence",
            pattern=r"\b(?:then|after|afterwards|before|next|later|first|second|finally)\b",
        ),
        TopicRule(
            "deadlines", "Deadlines",
            pattern=r"\b(?:deadline|due|expires?|expired|must|within)\b",
            required=False,
        ),
        TopicRule("claimedAmount", "Claimed Amount", pattern=_CURRENCY_AMOUNT, required=False),
    ),
    ConversationPhase.DETAILS: (
        TopicRule("specificNames", "Specific Names", pattern=r"\b[A-Z][a-z]+ [A-Z][a-z]+\b", case_sensitive=True),
        TopicRule(
            "locations", "Locations",
            pattern=r"\b(?:street|road|avenue|building|office|home|house|address|apartment|flat|"
                    r"city|town|store|shop|workplace|premises)\b",
        ),
        TopicRule("howItHappened", "How It Happened", pattern=r"\b(?:how|method|way|process|did|made|caused)\b"),
        TopicRule(
            "motivations", "Motivations",
            pattern=r"\b(?:because|reason|why|wanted|intended)\b",
            required=False,
        ),
    ),
    ConversationPhase.LEGAL: (
        TopicRule(
            "contracts", "Contracts",
            pattern=r"\b(?:contract|agreement|signed|terms|clause|lease)\b",
            required=False,
        ),
        TopicRule(
            "legalRelationships", "Legal Relationships",
            pattern=r"\b(?:employee|employer|tenant|landlord|client|customer|contractor|supplier|spouse|married)\b",
        ),
        TopicRule(
            "obligations", "Obligations",
            pattern=r"\b(?:must|should|required|obligated|duty|responsibilit\w*|supposed\s+to)\b",
        ),
        TopicRule(
            "violations", "Violations",
            pattern=r"\b(?:breach\w*|violat\w*|broke|failed|didn'?t|refused)\b",
            required=False,
        ),
    ),
    ConversationPhase.EVIDENCE: (
        TopicRule(
            "documents", "Documents",
            pattern=r"\b(?:documents?|papers?|files?|pdf|letters?|forms?|contract|receipts?|invoices?)\b",
        ),
        TopicRule("witnesses", "Witnesses", pattern=r"\b(?:witness\w*|saw|present|observed|colleagues?)\b"),
        TopicRule(
            "communications", "Communications",
            pattern=r"\b(?:emails?|texts?|messages?|calls?|called|wrote|sent|sms|whatsapp)\b",
        ),
        TopicRule(
            "physicalEvidence", "Physical Evidence",
            pattern=r"\b(?:photos?|videos?|recordings?|pictures?|evidence|screenshots?)\b",
            required=False,
        ),
    ),
    ConversationPhase.IMPACT: (
        TopicRule(
            "financialLoss", "Financial Loss",
            pattern=rf"{_CURRENCY_AMOUNT}|\b(?:money|cost|costs|paid|lost|expenses?|salary|wages)\b",
        ),
        TopicRule(
            "emotionalImpact", "Emotional Impact",
            pattern=r"\b(?:stress\w*|anxiety|anxious|upset|hurt|emotional\w*|feel|felt|sleep\w*|depress\w*)\b",
        ),
        TopicRule(
            "ongoingConsequences", "Ongoing Consequences",
            pattern=r"\b(?:still|continues?|ongoing|now|current\w*)\b",
        ),
        TopicRule(
            "futureImplications", "Future Implications",
            pattern=r"\b(?:will|future|next|plan\w*|worr\w*|concern\w*)\b",
            required=False,
        ),
    ),
    ConversationPhase.CLOSING: (
        TopicRule("gapsFilled", "Gaps Filled", pattern=r"\b(?:also|forgot|another\s+thing|add|missing|mention\w*)\b"),
        TopicRule(
            "factsConfirmed", "Facts Confirmed",
            pattern=r"\b(?:yes|correct|right|exactly|confirm\w*|accurate)\b",
        ),
        TopicRule(
            "readyForReport", "Ready For Report",
            pattern=r"\b(?:ready|nothing\s+else|that'?s\s+all|that\s+is\s+all|done|report|no\s+more)\b",
        ),
    ),
}

# Phases whose missing required topics are critical for any case
_CRITICAL_PHASES = (ConversationPhase.OPENING, ConversationPhase.TIMELINE)


@dataclass(frozen=True)
class TopicInfo:
    """Coverage of a single topic."""
    topic: str
    covered: bool = False
    confidence: TopicConfidence = TopicConfidence.NONE


@dataclass(frozen=True)
class InformationGaps:
    """Uncovered topics grouped by how much the case depends on them."""
    critical: tuple[str, ...] = ()   # Must have for a complete case
    important: tuple[str, ...] = ()  # Should have for a strong case
    optional: tuple[str, ...] = ()   # Nice to have

    def to_dict(self) -> dict:
        return {
            "critical": list(self.critical),
            "important": list(self.important),
            "optional": list(self.optional),
        }


@dataclass(frozen=True)
class InformationTracker:
    """
    Topic coverage for one conversation.

    Treat as immutable: update_tracker() returns a new tracker.
    """
    topics: dict[ConversationPhase, dict[str, TopicInfo]] = field(default_factory=dict)
    touched_phases: frozenset[ConversationPhase] = field(default_factory=frozenset)
    completeness: int = 0  # 0-100

    @property
    def gaps(self) -> dict[ConversationPhase, tuple[str, ...]]:
        """Uncovered topic ids per phase, in catalog order."""
        return {
            phase: tuple(key for key, info in topics.items() if not info.covered)
            for phase, topics in self.topics.items()
        }

    @property
    def prioritized_gaps(self) -> InformationGaps:
        critical, important, optional = [], [], []
        for phase in FULL_SEQUENCE:
            rules = {rule.key: rule for rule in TOPIC_CATALOG[phase]}
            for key, info in self.topics.get(phase, {}).items():
                label = f"{info.topic} ({phase.value})"
                if not info.covered:
                    if not rules[key].required:
                        optional.append(label)
                    elif phase in _CRITICAL_PHASES:
                        critical.append(label)
                    else:
                        important.append(label)
                elif info.confidence == TopicConfidence.LOW and rules[key].required:
                    important.append(f"More details needed: {label}")
        return InformationGaps(tuple(critical), tuple(important), tuple(optional))

    @property
    def phase_scores(self) -> dict[ConversationPhase, int]:
        """Per-phase completeness, 0-100."""
        return {phase: phase_completeness(self, phase) for phase in self.topics}

    def covered_topics(self, phase: ConversationPhase | str) -> tuple[str, ...]:
        topics = self.topics.get(coerce_phase(phase), {})
        return tuple(key for key, info in topics.items() if info.covered)

    def to_dict(self) -> dict:
        return {
            "completeness": self.completeness,
            "phase_scores": {p.value: s for p, s in self.phase_scores.items()},
            "gaps": {p.value: list(g) for p, g in self.gaps.items()},
            "prioritized_gaps": self.prioritized_gaps.to_dict(),
            "touched_phases": [p.value for p in FULL_SEQUENCE if p in self.touched_phases],
        }


def initialize_tracker() -> InformationTracker:
    """Create a tracker with every catalog topic uncovered."""
    return InformationTracker(
        topics={
            phase: {rule.key: TopicInfo(topic=rule.label) for rule in rules}
            for phase, rules in TOPIC_CATALOG.items()
        },
    )


def analyze_response_for_topics(response: str, phase: ConversationPhase | str) -> list[str]:
    """Topic keys of `phase` that the response addresses."""
    phase = coerce_phase(phase)
    return [rule.key for rule in TOPIC_CATALOG[phase] if rule.matches(response)]


def _confidence_for(response: str) -> TopicConfidence:
    length = len(response.strip())
    if length > 200:
        return TopicConfidence.HIGH
    if length > 100:
        return TopicConfidence.MEDIUM
    return TopicConfidence.LOW


def phase_completeness(tracker: InformationTracker, phase: ConversationPhase | str) -> int:
    topics = tracker.topics.get(coerce_phase(phase), {})
    if not topics:
        return 0
    covered = sum(1 for info in topics.values() if info.covered)
    return round(covered / len(topics) * 100)


def missing_topics(tracker: InformationTracker, phase: ConversationPhase | str) -> tuple[str, ...]:
    """Required topics of `phase` not covered yet."""
    phase = coerce_phase(phase)
    topics = tracker.topics.get(phase, {})
    return tuple(
        rule.key for rule in TOPIC_CATALOG[phase]
        if rule.required and not topics.get(rule.key, TopicInfo(rule.label)).covered
    )


def calculate_completeness(
    topics: dict[ConversationPhase, dict[str, TopicInfo]],
    touched_phases: frozenset[ConversationPhase],
) -> int:
    """Covered share of all topics in the phases touched so far."""
    total = covered = 0
    for phase in touched_phases:
        for info in topics.get(phase, {}).values():
            total += 1
            if info.covered:
                covered += 1
    return round(covered / total * 100) if total else 0


def update_tracker(
    tracker: InformationTracker,
    phase: ConversationPhase | str,
    response: str,
) -> InformationTracker:
    """
    Fold an answer into the tracker.

    Pure: the given tracker is left untouched. Applying the same answer to
    the same phase twice yields a tracker equal to applying it once.
    """
    phase = coerce_phase(phase)
    detected = analyze_response_for_topics(response, phase)
    confidence = _confidence_for(response)

    phase_topics = dict(tracker.topics.get(phase, {}))
    for key in detected:
        current: Optional[TopicInfo] = phase_topics.get(key)
        if current is None:
            continue
        if current.covered and current.confidence.rank >= confidence.rank:
            continue
        best = confidence if confidence.rank > current.confidence.rank else current.confidence
        phase_topics[key] = replace(current, covered=True, confidence=best)

    topics = dict(tracker.topics)
    topics[phase] = phase_topics
    touched = tracker.touched_phases | {phase}

    return InformationTracker(
        topics=topics,
        touched_phases=touched,
        completeness=max(tracker.completeness, calculate_completeness(topics, touched)),
    )
