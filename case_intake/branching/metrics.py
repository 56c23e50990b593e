"""
Aggregate answer-quality metrics for a conversation.
"""

from dataclasses import dataclass, replace

from .analyzer import AnswerQuality, AnswerQualityAssessment


@dataclass(frozen=True)
class QualityMetrics:
    """Running counters over every assessed answer in a conversation."""
    total_answers: int = 0
    average_score: float = 0.0
    excellent_count: int = 0
    good_count: int = 0
    acceptable_count: int = 0
    poor_count: int = 0
    unclear_count: int = 0
    follow_ups_asked: int = 0

    @property
    def follow_up_rate(self) -> float:
        """Share of answers that were followed up, 0.0-1.0."""
        if not self.total_answers:
            return 0.0
        return self.follow_ups_asked / self.total_answers

    def count_for(self, quality: AnswerQuality) -> int:
        return getattr(self, _COUNT_FIELDS[quality])

    def to_dict(self) -> dict:
        return {
            "total_answers": self.total_answers,
            "average_score": round(self.average_score, 1),
            "by_quality": {q.value: self.count_for(q) for q in AnswerQuality},
            "follow_ups_asked": self.follow_ups_asked,
            "follow_up_rate": round(self.follow_up_rate, 2),
        }


_COUNT_FIELDS = {
    AnswerQuality.EXCELLENT: "excellent_count",
    AnswerQuality.GOOD: "good_count",
    AnswerQuality.ACCEPTABLE: "acceptable_count",
    AnswerQuality.POOR: "poor_count",
    AnswerQuality.UNCLEAR: "unclear_count",
}


def initialize_quality_metrics() -> QualityMetrics:
    return QualityMetrics()


def update_quality_metrics(
    metrics: QualityMetrics,
    assessment: AnswerQualityAssessment,
    follow_up_asked: bool
) -> QualityMetrics:
    """Return metrics with one more answer counted. The input is not modified."""
    total = metrics.total_answers + 1
    average = (metrics.average_score * metrics.total_answers + assessment.score) / total
    field_name = _COUNT_FIELDS[assessment.quality]

    return replace(
        metrics,
        total_answers=total,
        average_score=average,
        follow_ups_asked=metrics.follow_ups_asked + (1 if follow_up_asked else 0),
        **{field_name: getattr(metrics, field_name) + 1}
    )
