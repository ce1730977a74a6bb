import unittest
from datetime import timedelta
from typing import Optional, Sequence

from pydantic import ValidationError

from quizsession.config.settings import QuizSettings
from quizsession.models import QuestionStatus, SessionState
from quizsession.session.actions import NextQuestion, SelectOption, SkipQuestion, Submit
from quizsession.session.navigation import derive_navigation, derive_stats
from quizsession.session.scoring import compute_score
from quizsession.session.store import new_session, transition

from support import T0, started_session


def answer_all(answers: Sequence[Optional[str]], settings: Optional[QuizSettings] = None, seconds: int = 120):
    """Answer question i with answers[i]; None leaves it unanswered, 'skip' skips it."""
    s = started_session(len(answers), settings)
    for i, ans in enumerate(answers):
        if ans == "skip":
            s = transition(s, SkipQuestion())
        elif ans is not None:
            s = transition(s, SelectOption(ans, T0))
        if i < len(answers) - 1:
            s = transition(s, NextQuestion())
    return transition(s, Submit(at=T0 + timedelta(seconds=seconds)))


class ScoringScenarioTests(unittest.TestCase):
    def test_plain_pass(self) -> None:
        s = answer_all(["a"] * 7 + ["b", "c"] + [None], QuizSettings(passing_percentage=60))
        score = s.score
        self.assertEqual((score.correct, score.incorrect, score.unanswered), (7, 2, 1))
        self.assertAlmostEqual(score.percentage, 70.0)
        self.assertTrue(score.passed)

    def test_negative_marking(self) -> None:
        s = answer_all(["a"] * 4 + ["b"] * 6, QuizSettings(negative_marking=True, negative_mark_value=-0.25))
        self.assertAlmostEqual(s.score.raw_score, 2.5)
        self.assertAlmostEqual(s.score.percentage, 25.0)
        self.assertFalse(s.score.passed)

    def test_percentage_clamped_at_zero(self) -> None:
        s = answer_all(["b"] * 4, QuizSettings(negative_marking=True, negative_mark_value=-1))
        self.assertAlmostEqual(s.score.raw_score, -4.0)
        self.assertEqual(s.score.percentage, 0.0)

    def test_positive_penalty_rejected(self) -> None:
        with self.assertRaises(ValidationError):
            QuizSettings(negative_marking=True, negative_mark_value=2.0)

    def test_negative_value_ignored_without_negative_marking(self) -> None:
        s = answer_all(["a", "b"], QuizSettings(negative_mark_value=-1))
        self.assertAlmostEqual(s.score.raw_score, 1.0)
        self.assertAlmostEqual(s.score.percentage, 50.0)


class ScoringDetailTests(unittest.TestCase):
    def test_counts_partition_total(self) -> None:
        s = answer_all(["a", "b", None, "skip", "a"])
        sc = s.score
        self.assertEqual(sc.correct + sc.incorrect + sc.unanswered + sc.skipped, sc.total)
        self.assertEqual(sc.skipped, 1)

    def test_skip_takes_precedence_over_selection(self) -> None:
        s = started_session(1)
        s = transition(s, SelectOption("a", T0))
        s = transition(s, SkipQuestion())
        s = transition(s, Submit(at=T0))
        self.assertEqual((s.score.skipped, s.score.correct), (1, 0))
        self.assertFalse(s.score.breakdown[0].is_correct)

    def test_time_and_average(self) -> None:
        s = answer_all(["a", "a", "a", "a"], seconds=90)
        self.assertEqual(s.score.total_time_spent, 90)
        self.assertAlmostEqual(s.score.average_time_per_question, 22.5)

    def test_breakdown_explanations_follow_setting(self) -> None:
        shown = answer_all(["a", "b"]).score.breakdown
        hidden = answer_all(["a", "b"], QuizSettings(show_explanations=False)).score.breakdown
        self.assertEqual(shown[1].explanation, "Because of rule 2")
        self.assertEqual(shown[1].user_answer, "b")
        self.assertEqual(shown[1].correct_answer, "a")
        self.assertTrue(all(b.explanation is None for b in hidden))

    def test_empty_session_scores_zero(self) -> None:
        s = new_session([])
        score = compute_score(s, T0)
        self.assertEqual(score.total, 0)
        self.assertEqual(score.percentage, 0.0)
        self.assertEqual(score.average_time_per_question, 0.0)
        self.assertFalse(score.passed)

    def test_to_json_uses_camel_case(self) -> None:
        data = answer_all(["a"]).score.to_json()
        self.assertIn("averageTimePerQuestion", data)
        self.assertEqual(data["breakdown"][0]["status"], "answered")


class DerivedViewTests(unittest.TestCase):
    def test_navigation_counts(self) -> None:
        s = started_session(3)
        nav = derive_navigation(s)
        self.assertFalse(nav.can_submit)
        self.assertTrue(nav.can_go_next)
        self.assertFalse(nav.can_go_previous)
        s = transition(s, SelectOption("a", T0))
        s = transition(s, NextQuestion())
        s = transition(s, SkipQuestion())
        nav = derive_navigation(s)
        self.assertEqual((nav.answered_count, nav.skipped_count, nav.current_index), (1, 1, 1))
        self.assertTrue(nav.can_submit)
        self.assertTrue(nav.can_go_previous)

    def test_finished_session_cannot_submit(self) -> None:
        s = answer_all(["a"])
        self.assertIs(s.state, SessionState.FINISHED)
        self.assertFalse(derive_navigation(s).can_submit)

    def test_stats_before_and_after_scoring(self) -> None:
        s = started_session(2)
        s = transition(s, SelectOption("b", T0))
        st = derive_stats(s)
        self.assertEqual((st.answered, st.unanswered), (1, 1))
        self.assertIsNone(st.accuracy)
        done = answer_all(["a", "b", "a", None])
        st = derive_stats(done)
        self.assertEqual((st.correct, st.incorrect), (2, 1))
        self.assertAlmostEqual(st.accuracy, 200 / 3)
        self.assertIs(done.attempts[3].status, QuestionStatus.NOT_ANSWERED)


if __name__ == "__main__":
    unittest.main()
