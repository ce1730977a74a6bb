import random
import tempfile
import unittest
from pathlib import Path

from quizsession.config.settings import QuizSettings
from quizsession.errors import QuestionFormatError
from quizsession.models import QuestionRecord
from quizsession.session.questions import load_questions, parse_questions, prepare_questions

from support import make_questions

BANK_YAML = """\
questions:
  - id: 1
    question: What is 2 + 2?
    options: ["3", "4", "5"]
    answerIndex: 1
    reason: Basic addition.
    topic: Arithmetic
  - id: geo-1
    prompt: Sum of angles in a triangle?
    options:
      - {id: x, text: "90"}
      - {id: y, text: "180"}
    correctOptionId: y
    meta:
      difficulty: easy
      tags: [Geometry]
      timeLimit: 30
"""


class QuestionParsingTests(unittest.TestCase):
    def test_bank_shape(self) -> None:
        q = QuestionRecord.from_json(
            {"id": 7, "question": "Pick B", "options": ["A", "B"], "answerIndex": 1, "reason": "It is B."}
        )
        self.assertEqual(q.id, "7")
        self.assertEqual([o.id for o in q.options], ["0", "1"])
        self.assertEqual(q.correct_option_id, "1")
        self.assertEqual(q.explanation, "It is B.")

    def test_canonical_round_trip(self) -> None:
        q = make_questions(1, topic="Algebra")[0]
        again = QuestionRecord.from_json(q.to_json())
        self.assertEqual(again, q)

    def test_invalid_records(self) -> None:
        bad = [
            "not a mapping",
            {"prompt": "no id", "options": ["a"], "answerIndex": 0},
            {"id": 1, "options": ["a"], "answerIndex": 0},
            {"id": 1, "prompt": "p", "options": [], "answerIndex": 0},
            {"id": 1, "prompt": "p", "options": ["a"], "answerIndex": 3},
            {"id": 1, "prompt": "p", "options": ["a"]},
            {"id": 1, "prompt": "p", "options": [{"id": "a", "text": "A"}], "correctOptionId": "z"},
        ]
        for data in bad:
            with self.assertRaises(QuestionFormatError, msg=repr(data)):
                QuestionRecord.from_json(data)

    def test_duplicate_ids_rejected(self) -> None:
        q = make_questions(1)[0]
        with self.assertRaises(QuestionFormatError):
            parse_questions([q, q])

    def test_load_yaml_file(self) -> None:
        with tempfile.TemporaryDirectory() as tmp:
            path = Path(tmp) / "bank.yml"
            path.write_text(BANK_YAML, encoding="utf-8")
            qs = load_questions(path)
        self.assertEqual([q.id for q in qs], ["1", "geo-1"])
        self.assertEqual(qs[0].topic_label, "Arithmetic")
        self.assertEqual(qs[1].topic_label, "Geometry")
        self.assertEqual(qs[1].difficulty, "easy")
        self.assertEqual(qs[1].time_limit, 30)

    def test_load_errors(self) -> None:
        with tempfile.TemporaryDirectory() as tmp:
            with self.assertRaises(QuestionFormatError):
                load_questions(Path(tmp) / "missing.yml")
            path = Path(tmp) / "scalar.yml"
            path.write_text("just text\n", encoding="utf-8")
            with self.assertRaises(QuestionFormatError):
                load_questions(path)


class PrepareQuestionsTests(unittest.TestCase):
    def test_cap_and_shuffle_keep_correct_ids(self) -> None:
        bank = make_questions(20)
        settings = QuizSettings(shuffle_questions=True, shuffle_options=True, questions_per_session=5)
        prepared = prepare_questions(bank, settings, random.Random(3))
        self.assertEqual(len(prepared), 5)
        for q in prepared:
            self.assertEqual(q.correct_option_id, "a")
            self.assertEqual(sorted(o.id for o in q.options), ["a", "b", "c", "d"])

    def test_no_shuffle_keeps_order(self) -> None:
        bank = make_questions(4)
        settings = QuizSettings(shuffle_questions=False, shuffle_options=False, questions_per_session=3)
        prepared = prepare_questions(bank, settings)
        self.assertEqual(prepared, bank[:3])


if __name__ == "__main__":
    unittest.main()
