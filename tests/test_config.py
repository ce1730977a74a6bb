import tempfile
import unittest
from pathlib import Path

from quizsession.app.engine import QuizEngine
from quizsession.config.config import analytics_config, load_config, settings_from_config, validate_config
from quizsession.errors import ConfigError


class ConfigTests(unittest.TestCase):
    def setUp(self) -> None:
        self.tmp = tempfile.TemporaryDirectory()
        self.dir = Path(self.tmp.name)

    def tearDown(self) -> None:
        self.tmp.cleanup()

    def _write(self, text: str) -> str:
        path = self.dir / "cfg.yml"
        path.write_text(text, encoding="utf-8")
        return str(path)

    def test_packaged_defaults(self) -> None:
        cfg = validate_config(load_config())
        settings = settings_from_config(cfg)
        self.assertEqual(settings.passing_percentage, 60)
        self.assertEqual(settings.questions_per_session, 10)
        self.assertEqual(cfg["timer"]["warning_threshold"], 300)
        self.assertEqual(cfg["history"]["cap"], 50)
        self.assertEqual(analytics_config(cfg).strong_threshold, 80)

    def test_partial_file_gets_defaults_and_camel_case(self) -> None:
        cfg = validate_config(load_config(self._write("quiz:\n  negativeMarking: true\n  negativeMarkValue: -0.5\n")))
        settings = settings_from_config(cfg)
        self.assertTrue(settings.negative_marking)
        self.assertEqual(settings.negative_mark_value, -0.5)
        self.assertEqual(cfg["timer"]["tick_seconds"], 1.0)
        self.assertTrue(cfg["history"]["enabled"])

    def test_unsupported_values_fall_back_with_warning(self) -> None:
        path = self._write("timer:\n  warning_threshold: -5\n  tick_seconds: soon\nhistory:\n  cap: 0\n")
        with self.assertLogs("quizsession.config.config", level="WARNING"):
            cfg = validate_config(load_config(path))
        self.assertEqual(cfg["timer"]["warning_threshold"], 300)
        self.assertEqual(cfg["timer"]["tick_seconds"], 1.0)
        self.assertEqual(cfg["history"]["cap"], 50)

    def test_invalid_quiz_settings_raise(self) -> None:
        with self.assertRaises(ConfigError):
            validate_config(load_config(self._write("quiz:\n  passing_percentage: 150\n")))
        with self.assertRaises(ConfigError):
            validate_config(load_config(self._write("quiz:\n  negativeMarkValue: 2.0\n")))

    def test_missing_and_malformed_files_raise(self) -> None:
        with self.assertRaises(ConfigError):
            load_config(str(self.dir / "nope.yml"))
        with self.assertRaises(ConfigError):
            load_config(self._write("quiz: [unclosed\n"))
        with self.assertRaises(ConfigError):
            load_config(self._write("- just\n- a list\n"))

    def test_engine_from_config(self) -> None:
        cfg = validate_config(load_config(self._write("quiz:\n  passing_percentage: 75\ntimer:\n  tick_seconds: 0\n  critical_threshold: 30\n")))
        engine = QuizEngine.from_config(cfg)
        self.assertEqual(engine.settings.passing_percentage, 75)
        self.assertEqual(engine.critical_threshold, 30)
        self.assertEqual(engine._timer.tick_seconds, 0.0)


if __name__ == "__main__":
    unittest.main()
