import tempfile
import unittest
from datetime import timedelta
from pathlib import Path

from quizsession.models import AnswerOption, QuestionRecord
from quizsession.results.recorder import HistoryRecorder, build_entry
from quizsession.session.actions import NextQuestion, SelectOption, Start, Submit, TimerTick
from quizsession.session.store import new_session, transition
from storage.store import HistoryRepository

from support import T0, make_entry, started_session


def finished(session):
    return transition(session, Submit(at=T0 + timedelta(seconds=30)))


class BuildEntryTests(unittest.TestCase):
    def test_entry_from_finished_session(self) -> None:
        questions = [
            QuestionRecord("q1", "One?", (AnswerOption("a", "A"), AnswerOption("b", "B")), "a", topic="Algebra"),
            QuestionRecord("q2", "Two?", (AnswerOption("a", "A"), AnswerOption("b", "B")), "b", tags=("Geometry",)),
            QuestionRecord("q3", "Three?", (AnswerOption("a", "A"), AnswerOption("b", "B")), "a"),
        ]
        s = transition(new_session(questions, subject="math", session_id="sess-1"), Start(at=T0))
        s = transition(s, SelectOption("a", T0))
        s = transition(s, TimerTick(elapsed=4.0, delta=4.0))
        s = transition(s, NextQuestion())
        s = transition(s, SelectOption("a", T0))
        entry = build_entry(finished(s))
        self.assertEqual(entry.id, "sess-1")
        self.assertEqual(entry.subject_id, "math")
        self.assertEqual((entry.score.obtained, entry.score.total), (1, 3))
        self.assertAlmostEqual(entry.score.percentage, 100 / 3)
        self.assertEqual([q.topic for q in entry.questions], ["Algebra", "Geometry", "General"])
        self.assertEqual([q.is_correct for q in entry.questions], [True, False, False])
        self.assertEqual(entry.time_spent, 4.0)
        self.assertEqual(entry.completed_at, T0 + timedelta(seconds=30))

    def test_unfinished_session_rejected(self) -> None:
        with self.assertRaises(ValueError):
            build_entry(started_session())


class HistoryRecorderTests(unittest.TestCase):
    def setUp(self) -> None:
        self.tmp = tempfile.TemporaryDirectory()
        self.repo = HistoryRepository(Path(self.tmp.name))
        self.recorder = HistoryRecorder(self.repo)

    def tearDown(self) -> None:
        self.tmp.cleanup()

    def test_unfinished_sessions_are_not_recorded(self) -> None:
        self.assertIsNone(self.recorder.record(None))
        self.assertIsNone(self.recorder.record(started_session()))
        self.assertEqual(self.repo.list_subjects(), [])

    def test_record_appends_and_aggregates(self) -> None:
        s = transition(started_session(2, subject="math"), SelectOption("a", T0))
        log = self.recorder.record(finished(s))
        self.assertEqual(log.subject, "math")
        self.assertEqual(log.aggregate.total_attempts, 1)
        self.assertAlmostEqual(log.aggregate.average_score, 50.0)
        self.assertAlmostEqual(log.aggregate.best_score, 50.0)
        self.assertEqual(log.aggregate.improvement_rate, 0.0)

    def test_improvement_rate_over_whole_log(self) -> None:
        for i, pct in enumerate([40.0, 60.0, 60.0, 90.0]):
            log = self.repo.append("math", make_entry(i, pct))
            if i < 3:
                self.assertEqual(log.aggregate.improvement_rate, 0.0)
        # first half avg 50, second half avg 75
        self.assertAlmostEqual(log.aggregate.improvement_rate, 50.0)
        self.assertAlmostEqual(log.aggregate.average_score, 62.5)
        self.assertAlmostEqual(log.aggregate.best_score, 90.0)

    def test_improvement_rate_odd_count_and_zero_start(self) -> None:
        for i, pct in enumerate([0.0, 0.0, 50.0, 50.0]):
            log = self.repo.append("zero", make_entry(i, pct))
        self.assertEqual(log.aggregate.improvement_rate, 0.0)
        for i, pct in enumerate([50.0, 50.0, 50.0, 80.0, 80.0]):
            log = self.repo.append("odd", make_entry(i, pct))
        # first half = first two entries (50), second half = last three (70)
        self.assertAlmostEqual(log.aggregate.improvement_rate, 40.0)

    def test_total_time_sums_question_time(self) -> None:
        self.repo.append("t", make_entry(0, 50.0, topics=[("A", True, 3.0), ("B", False, 4.5)]))
        log = self.repo.append("t", make_entry(1, 50.0, topics=[("A", True, 2.5)]))
        self.assertAlmostEqual(log.aggregate.total_time_spent, 10.0)


if __name__ == "__main__":
    unittest.main()
