"""
Tests for answer quality assessment.
"""

import sys
from pathlib import Path

sys.path.insert(0, str(Path(__file__).parent.parent))

from case_intake.branching.analyzer import (
    AnswerAnalyzer,
    AnswerQuality,
    IssueType,
    assess_answer_quality,
)
from case_intake.branching.triggers import IssueSeverity, get_all_probes, load_phase_probes
from case_intake.config import PolicyConfig
from case_intake.phases import ConversationPhase

OPENING_QUESTION = "Can you tell me in your own words what happened and what you need help with?"

DETAILED_ANSWER = (
    "My employer fired me last month without any warning after I complained "
    "to my manager about unpaid overtime wages."
)


# ═══════════════════════════════════════════════════════════════
# EMPTY AND SHORT ANSWERS
# ═══════════════════════════════════════════════════════════════

class TestEmptyAnswers:

    def test_empty_answer_is_lowest_quality(self):
        result = assess_answer_quality("", ConversationPhase.OPENING)
        assert result.quality == AnswerQuality.UNCLEAR
        assert result.score == 0
        assert result.needs_follow_up
        assert result.confidence == 0
        assert result.issue_types == [IssueType.NO_CONTENT]

    def test_whitespace_only_is_empty(self):
        result = assess_answer_quality("   \n\t ", ConversationPhase.TIMELINE, "When did it start?")
        assert result.quality == AnswerQuality.UNCLEAR
        assert result.score == 0

    def test_none_answer_is_empty(self):
        result = assess_answer_quality(None, ConversationPhase.OPENING)
        assert result.score == 0


class TestLengthAndHedging:

    def test_short_hedged_answer(self):
        result = assess_answer_quality("Not sure", ConversationPhase.OPENING, OPENING_QUESTION)
        assert result.score == 50
        assert result.quality == AnswerQuality.ACCEPTABLE
        assert result.needs_follow_up
        assert result.issues[0].type == IssueType.INCOMPLETE
        assert result.issues[0].severity == IssueSeverity.CRITICAL
        assert IssueType.VAGUE in result.issue_types

    def test_many_hedges_in_long_answer(self):
        answer = "I think maybe it was probably around the spring, not sure."
        result = assess_answer_quality(answer, ConversationPhase.OPENING)
        assert result.issue_types == [IssueType.VAGUE]
        assert result.issues[0].severity == IssueSeverity.MODERATE
        assert result.score == 80
        assert not result.needs_follow_up

    def test_detailed_answer_is_excellent(self):
        result = assess_answer_quality(DETAILED_ANSWER, ConversationPhase.OPENING, OPENING_QUESTION)
        assert result.quality == AnswerQuality.EXCELLENT
        assert result.score == 100
        assert result.issues == ()
        assert result.is_adequate
        assert result.confidence == 100

    def test_policy_thresholds_apply(self):
        policy = PolicyConfig(min_answer_length=3, short_answer_length=5)
        result = AnswerAnalyzer(policy).assess("Not sure", ConversationPhase.OPENING)
        assert result.quality == AnswerQuality.EXCELLENT
        assert not result.needs_follow_up


# ═══════════════════════════════════════════════════════════════
# PHASE PROBES
# ═══════════════════════════════════════════════════════════════

class TestPhaseProbes:

    def test_when_question_without_date(self):
        result = assess_answer_quality(
            "It was a while back, hard to say exactly.",
            ConversationPhase.TIMELINE,
            "When did this start?"
        )
        assert IssueType.MISSING_DETAILS in result.issue_types
        assert result.issues[0].severity == IssueSeverity.CRITICAL
        assert result.needs_follow_up

    def test_when_question_with_date(self):
        result = assess_answer_quality(
            "It started in March 2023 when my landlord refused to return my deposit.",
            ConversationPhase.TIMELINE,
            "When did this start?"
        )
        assert IssueType.MISSING_DETAILS not in result.issue_types
        assert result.quality == AnswerQuality.EXCELLENT

    def test_probe_requires_matching_question(self):
        result = assess_answer_quality(
            "It was a while back, hard to say exactly.",
            ConversationPhase.TIMELINE,
            ""
        )
        assert IssueType.MISSING_DETAILS not in result.issue_types

    def test_evidence_probe_accepts_plain_no(self):
        result = assess_answer_quality(
            "No, nothing was ever written down by anyone.",
            ConversationPhase.EVIDENCE,
            "Do you have any documents or evidence?"
        )
        assert IssueType.MISSING_DETAILS not in result.issue_types

    def test_every_probe_belongs_to_its_phase(self):
        for probe in get_all_probes():
            assert probe in load_phase_probes(probe.phase)

    def test_opening_and_closing_have_no_probes(self):
        assert load_phase_probes(ConversationPhase.OPENING) == ()
        assert load_phase_probes("closing") == ()


# ═══════════════════════════════════════════════════════════════
# OFF-TOPIC, CONTRADICTIONS, TRAILING OFF
# ═══════════════════════════════════════════════════════════════

class TestOtherIssues:

    def test_off_topic_answer(self):
        question = "Who else was involved in the situation?"
        result = assess_answer_quality(
            "I really like pizza and watching football games.",
            ConversationPhase.OPENING,
            question
        )
        assert result.issue_types == [IssueType.OFF_TOPIC]
        assert result.score == 70
        assert question in result.issues[0].suggested_follow_up

    def test_answer_sharing_question_words_is_on_topic(self):
        result = assess_answer_quality(
            "The situation involved three coworkers from accounting.",
            ConversationPhase.OPENING,
            "Who else was involved in the situation?"
        )
        assert IssueType.OFF_TOPIC not in result.issue_types

    def test_off_topic_needs_a_question(self):
        result = assess_answer_quality(
            "I really like pizza and watching football games.",
            ConversationPhase.OPENING
        )
        assert IssueType.OFF_TOPIC not in result.issue_types

    def test_contradiction_is_minor(self):
        result = assess_answer_quality(
            "He paid the full rent in January. Actually, no, he paid only half of it.",
            ConversationPhase.OPENING
        )
        assert IssueType.CONTRADICTORY in result.issue_types
        assert result.score == 90

    def test_trailing_off(self):
        result = assess_answer_quality(
            "He took the keys, the car, the furniture and so on...",
            ConversationPhase.OPENING
        )
        assert result.issue_types == [IssueType.UNFINISHED]
        assert result.issues[0].severity == IssueSeverity.MINOR
        # A minor issue alone does not make the answer inadequate
        assert result.is_adequate
        assert not result.needs_follow_up


class TestAssessmentShape:

    def test_issues_ordered_most_severe_first(self):
        result = assess_answer_quality("I don't know", ConversationPhase.TIMELINE, "When did this start?")
        ranks = [issue.severity.rank for issue in result.issues]
        assert ranks == sorted(ranks)
        assert result.issues[0].severity == IssueSeverity.CRITICAL

    def test_assessment_is_deterministic(self):
        first = assess_answer_quality("Not sure", ConversationPhase.DETAILS, "Where did it happen?")
        second = assess_answer_quality("Not sure", ConversationPhase.DETAILS, "Where did it happen?")
        assert first == second

    def test_to_dict(self):
        data = assess_answer_quality("", ConversationPhase.OPENING).to_dict()
        assert data["quality"] == "unclear"
        assert data["issues"][0]["type"] == "no_content"
        assert data["issues"][0]["severity"] == "critical"

    def test_score_stays_in_range(self):
        answer = "no... maybe, I think, not sure, probably, i guess etc"
        result = assess_answer_quality(answer, ConversationPhase.IMPACT, "What did it cost you in money?")
        assert 0 <= result.score <= 100
