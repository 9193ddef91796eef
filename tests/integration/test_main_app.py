#!/usr/bin/env python3
"""
Application Entry Point Tests

Runs main() end to end with a settings file in a scratch directory and
scripted console input.
"""

import unittest
from unittest.mock import patch
import io
import logging
import sys
import tempfile
from pathlib import Path

# Add the src directory to the Python path
sys.path.append(str(Path(__file__).resolve().parents[2] / "src"))

from slotkeeper.infrastructure.config import AppSettings
from slotkeeper.main import ParkingApplication, build_parser, main, setup_logging


class TestMainApplication(unittest.TestCase):
    """Integration tests for the application entry point"""

    def setUp(self):
        self.temp_dir = tempfile.TemporaryDirectory()
        self.root = Path(self.temp_dir.name)
        self.config_path = self.root / "slotkeeper.yaml"
        self.config_path.write_text(
            "state_file: state.bin\n"
            "tariff_file: tariffs.txt\n"
            "capacity: 5\n"
            "log_file: logs/app.log\n"
        )

    def tearDown(self):
        for handler in logging.root.handlers[:]:
            handler.close()
            logging.root.removeHandler(handler)
        self.temp_dir.cleanup()

    def run_main(self, script, argv=None):
        argv = argv if argv is not None else ["--config", str(self.config_path)]
        output = io.StringIO()
        with patch("sys.stdin", io.StringIO(script)), patch("sys.stdout", output):
            exit_code = main(argv)
        return exit_code, output.getvalue()

    def test_session_persists_between_runs(self):
        exit_code, _ = self.run_main("1\nABC123\n0\n7\n")

        self.assertEqual(exit_code, 0)
        self.assertTrue((self.root / "state.bin").is_file())
        self.assertTrue((self.root / "tariffs.txt").is_file())

        exit_code, output = self.run_main("3\n7\n")

        self.assertEqual(exit_code, 0)
        self.assertIn("| Occupied | ABC123  |", output)
        self.assertEqual(output.count("| Free     |"), 4)

    def test_log_file_written(self):
        self.run_main("7\n")

        log_text = (self.root / "logs" / "app.log").read_text()
        self.assertIn("Starting SlotKeeper", log_text)
        self.assertIn("Saved state", log_text)

    def test_invalid_config(self):
        self.config_path.write_text("capacity: -1\n")
        stderr = io.StringIO()

        with patch("sys.stderr", stderr):
            exit_code, _ = self.run_main("7\n")

        self.assertEqual(exit_code, 2)
        self.assertIn("Configuration error", stderr.getvalue())
        self.assertFalse((self.root / "state.bin").exists())

    def test_console_shows_only_warnings(self):
        output = io.StringIO()
        with patch("sys.stdout", output):
            logger = setup_logging(AppSettings(log_file=None))
            logger.info("quiet")
            logger.warning("loud")

        self.assertNotIn("quiet", output.getvalue())
        self.assertIn("loud", output.getvalue())

    def test_unwritable_log_file_falls_back_to_console(self):
        blocker = self.root / "not_a_dir"
        blocker.write_text("")
        output = io.StringIO()

        with patch("sys.stdout", output):
            logger = setup_logging(AppSettings(log_file=blocker / "app.log"))
            logger.warning("still logging")

        self.assertIn("Cannot open log file", output.getvalue())
        self.assertIn("still logging", output.getvalue())
        self.assertFalse(any(isinstance(h, logging.FileHandler) for h in logging.root.handlers))

    def test_components_follow_settings(self):
        settings = AppSettings(capacity=7, log_file=None).resolve(self.root)
        app = ParkingApplication(settings)

        self.assertEqual(app.registry.capacity, 7)
        self.assertEqual(app.state_repository.path, self.root / "slotkeeper_state.bin")
        self.assertIs(app.parking_service.registry, app.registry)

    def test_parser(self):
        args = build_parser().parse_args(["--config", "custom.yaml"])
        self.assertEqual(args.config, "custom.yaml")
        self.assertIsNone(build_parser().parse_args([]).config)


if __name__ == '__main__':
    unittest.main()
