"""
Tests for the information tracker.
"""

import sys
from pathlib import Path

sys.path.insert(0, str(Path(__file__).parent.parent))

from case_intake.phases import ConversationPhase
from case_intake.tracking import (
    TopicConfidence,
    analyze_response_for_topics,
    initialize_tracker,
    missing_topics,
    update_tracker,
)

TIMELINE_ANSWER = (
    "It started in March 2023 when my landlord refused to return my deposit "
    "of $1,500, and then he stopped answering my calls."
)


class TestInitialTracker:

    def test_nothing_covered(self):
        tracker = initialize_tracker()
        assert tracker.completeness == 0
        assert all(not info.covered for topics in tracker.topics.values() for info in topics.values())

    def test_prioritized_gaps(self):
        gaps = initialize_tracker().prioritized_gaps
        assert "Main Issue (opening)" in gaps.critical
        assert "Start Date (timeline)" in gaps.critical
        assert "Specific Names (details)" in gaps.important
        assert "Deadlines (timeline)" in gaps.optional
        assert "Deadlines (timeline)" not in gaps.critical


class TestTopicDetection:

    def test_timeline_topics(self):
        topics = analyze_response_for_topics(TIMELINE_ANSWER, ConversationPhase.TIMELINE)
        assert set(topics) == {"startDate", "keyEvents", "eventSequence", "claimedAmount"}

    def test_specific_names_are_case_sensitive(self):
        assert "specificNames" in analyze_response_for_topics(
            "I spoke with Anna Svensson at the office", ConversationPhase.DETAILS
        )
        assert "specificNames" not in analyze_response_for_topics(
            "i spoke with anna svensson at the office", ConversationPhase.DETAILS
        )

    def test_long_opening_answer_counts_as_context(self):
        answer = "x " * 40
        assert "basicContext" in analyze_response_for_topics(answer, ConversationPhase.OPENING)


class TestUpdateTracker:

    def test_timeline_answer_raises_completeness(self):
        tracker = initialize_tracker()
        updated = update_tracker(tracker, ConversationPhase.TIMELINE, TIMELINE_ANSWER)

        assert set(updated.covered_topics(ConversationPhase.TIMELINE)) == {
            "startDate", "keyEvents", "eventSequence", "claimedAmount"
        }
        assert updated.completeness == 80
        assert updated.completeness > tracker.completeness

    def test_update_is_pure(self):
        tracker = initialize_tracker()
        update_tracker(tracker, ConversationPhase.TIMELINE, TIMELINE_ANSWER)
        assert tracker.covered_topics(ConversationPhase.TIMELINE) == ()
        assert tracker.completeness == 0

    def test_update_is_idempotent(self):
        once = update_tracker(initialize_tracker(), ConversationPhase.TIMELINE, TIMELINE_ANSWER)
        twice = update_tracker(once, ConversationPhase.TIMELINE, TIMELINE_ANSWER)
        assert twice == once

    def test_completeness_never_decreases(self):
        tracker = update_tracker(initialize_tracker(), ConversationPhase.TIMELINE, TIMELINE_ANSWER)
        before = tracker.completeness
        tracker = update_tracker(tracker, ConversationPhase.OPENING, "ok")
        tracker = update_tracker(tracker, ConversationPhase.LEGAL, "")
        assert tracker.completeness >= before

    def test_confidence_never_lowers(self):
        long_answer = "My landlord " + "kept calling and threatening me " * 8
        tracker = update_tracker(initialize_tracker(), ConversationPhase.OPENING, long_answer)
        assert tracker.topics[ConversationPhase.OPENING]["involvedParties"].confidence == TopicConfidence.HIGH

        tracker = update_tracker(tracker, ConversationPhase.OPENING, "my landlord")
        assert tracker.topics[ConversationPhase.OPENING]["involvedParties"].confidence == TopicConfidence.HIGH

    def test_empty_answer_only_touches_phase(self):
        tracker = update_tracker(initialize_tracker(), ConversationPhase.OPENING, "")
        assert tracker.covered_topics(ConversationPhase.OPENING) == ()
        assert ConversationPhase.OPENING in tracker.touched_phases
        assert tracker.completeness == 0

    def test_missing_topics_lists_required_only(self):
        tracker = update_tracker(initialize_tracker(), ConversationPhase.TIMELINE, "It happened in 2021")
        missing = missing_topics(tracker, ConversationPhase.TIMELINE)
        assert "startDate" not in missing
        assert "eventSequence" in missing
        assert "deadlines" not in missing

    def test_low_confidence_topic_needs_more_detail(self):
        tracker = update_tracker(initialize_tracker(), ConversationPhase.DETAILS, "At the office")
        assert "More details needed: Locations (details)" in tracker.prioritized_gaps.important

    def test_to_dict_is_json_safe(self):
        import json
        tracker = update_tracker(initialize_tracker(), ConversationPhase.TIMELINE, TIMELINE_ANSWER)
        data = json.loads(json.dumps(tracker.to_dict()))
        assert data["completeness"] == 80
        assert data["touched_phases"] == ["timeline"]
