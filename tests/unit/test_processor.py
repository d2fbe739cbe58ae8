"""Unit tests for attempt processing."""

from datetime import datetime, timedelta, timezone

import pytest

from masterycore.modules.mastery.interface import DifficultyStats, QuestionAttempt
from masterycore.modules.mastery.processor import default_proficiency, process_attempt
from masterycore.shared.exceptions import InvalidAttemptError, InvalidDifficultyError, ValidationError
from masterycore.shared.models import Difficulty, Trend


class TestDefaultProficiency:
    """Tests for the record used for unseen topics."""

    def test_defaults(self, now):
        record = default_proficiency("new_topic", now)

        assert record.topic_id == "new_topic"
        assert record.proficiency == 0.5
        assert record.confidence == 0.0
        assert record.total_attempts == 0
        assert record.correct_attempts == 0
        assert record.needs_review is True
        assert record.trend == Trend.UNKNOWN
        assert record.last_practiced == now
        assert record.next_review_date == now + timedelta(days=1)
        assert record.difficulty_breakdown.easy == DifficultyStats()


class TestProcessAttempt:
    """Tests for per-topic updates."""

    def test_new_topics_get_one_update_each(self, make_attempt, now):
        attempt = make_attempt(topic_ids=("topic1", "topic2"), difficulty=Difficulty.MED, time_spent_ms=75000)

        updates = process_attempt(attempt)

        assert [u.topic_id for u in updates] == ["topic1", "topic2"]
        for update in updates:
            assert update.total_attempts == 1
            assert update.correct_attempts == 1
            # No history yet, so the estimate does not move
            assert update.proficiency == 0.5
            assert update.confidence == pytest.approx(0.1)
            assert update.consecutive_correct == 1
            assert update.consecutive_incorrect == 0
            assert update.average_time_spent == 75000
            assert update.difficulty_breakdown.med == DifficultyStats(1, 1, 75000)
            assert update.needs_review is True
            assert update.last_practiced == now
            # max(0.5, 0.5) * 2^1 = 1 day
            assert update.next_review_date == now + timedelta(days=1)

    def test_updates_existing_record(self, make_record, make_attempt, now):
        record = make_record()
        attempt = make_attempt(is_correct=False, difficulty=Difficulty.MED, time_spent_ms=30000)

        (update,) = process_attempt(attempt, {"topic1": record})

        # alpha = 0.3 * 6/10; score 0
        assert update.proficiency == pytest.approx(0.492)
        assert update.total_attempts == 7
        assert update.correct_attempts == 4
        assert update.consecutive_correct == 0
        assert update.consecutive_incorrect == 1
        assert update.average_time_spent == pytest.approx(390000 / 7)
        assert update.difficulty_breakdown.med == DifficultyStats(2, 4, 52500)
        assert update.difficulty_breakdown.easy == record.difficulty_breakdown.easy
        assert update.difficulty_breakdown.hard == record.difficulty_breakdown.hard
        assert update.confidence == pytest.approx(0.7 * 4 * 0.492 * 0.508)
        assert update.needs_review is True
        assert update.next_review_date == now + timedelta(hours=12)

    def test_error_streak_forces_review(self, make_record, make_attempt):
        record = make_record(proficiency=0.9, consecutive_correct=0, consecutive_incorrect=2)

        (update,) = process_attempt(make_attempt(is_correct=False), {"topic1": record})

        assert update.proficiency >= 0.7
        assert update.consecutive_incorrect == 3
        assert update.needs_review is True

    def test_strong_correct_answer_clears_review(self, make_record, make_attempt):
        record = make_record(proficiency=0.9, total_attempts=10, correct_attempts=9, consecutive_correct=2)

        (update,) = process_attempt(
            make_attempt(difficulty=Difficulty.EASY, time_spent_ms=100000),
            {"topic1": record},
        )

        assert update.proficiency == pytest.approx(0.93)
        assert update.consecutive_correct == 3
        assert update.needs_review is False

    def test_empty_topic_list(self, make_attempt):
        assert process_attempt(make_attempt(topic_ids=())) == []

    def test_explicit_now_overrides_attempt_date(self, make_attempt, now):
        later = now + timedelta(hours=3)
        (update,) = process_attempt(make_attempt(), now=later)
        assert update.last_practiced == later

    def test_duplicate_topics_use_same_snapshot(self, make_record, make_attempt):
        record = make_record()
        updates = process_attempt(make_attempt(topic_ids=("topic1", "topic1")), {"topic1": record})

        assert len(updates) == 2
        assert updates[0] == updates[1]
        assert updates[0].total_attempts == record.total_attempts + 1

    def test_apply_to_keeps_trend(self, make_record, make_attempt):
        record = make_record(trend=Trend.IMPROVING)
        (update,) = process_attempt(make_attempt(), {"topic1": record})

        assert update.apply_to(record).trend == Trend.IMPROVING
        assert update.apply_to(None).trend == Trend.UNKNOWN
        assert update.apply_to(record).proficiency == update.proficiency


class TestQuestionAttemptValidation:
    """Tests for attempt construction."""

    def _attempt(self, **overrides):
        values = {
            "question_id": "q1",
            "topic_ids": ["t1"],
            "is_correct": True,
            "time_spent_ms": 1000,
            "difficulty": "med",
        }
        values.update(overrides)
        return QuestionAttempt(**values)

    def test_coerces_inputs(self):
        attempt = self._attempt(attempt_date=datetime(2026, 1, 1, 9, 0))

        assert attempt.topic_ids == ("t1",)
        assert attempt.difficulty == Difficulty.MED
        assert attempt.attempt_date.tzinfo == timezone.utc

    def test_defaults_attempt_date_to_now(self):
        assert self._attempt().attempt_date.tzinfo is not None

    @pytest.mark.parametrize("value", [-1, float("nan"), float("inf"), True, "60"])
    def test_rejects_bad_time(self, value):
        with pytest.raises(InvalidAttemptError) as exc_info:
            self._attempt(time_spent_ms=value)
        assert exc_info.value.details["field"] == "time_spent_ms"

    def test_zero_time_is_allowed(self):
        assert self._attempt(time_spent_ms=0).time_spent_ms == 0

    def test_rejects_unknown_difficulty(self):
        with pytest.raises(InvalidDifficultyError):
            self._attempt(difficulty="expert")

    def test_rejects_blank_topic_id(self):
        with pytest.raises(ValidationError):
            self._attempt(topic_ids=["t1", ""])
