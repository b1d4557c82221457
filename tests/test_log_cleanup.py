import datetime
import tempfile
import unittest
from pathlib import Path

from Function.log_cleanup import clean_old_logs
from support import RecordingLogger


class LogCleanupTests(unittest.TestCase):
    def test_only_expired_log_files_are_removed(self):
        today = datetime.datetime.now()
        old = (today - datetime.timedelta(days=10)).strftime("%Y%m%d")
        recent = today.strftime("%Y%m%d")

        with tempfile.TemporaryDirectory() as tmp:
            root = Path(tmp)
            for name in (f"Log_{old}.log", f"Log_{recent}.log", "Log_notadate.log", "other.txt"):
                (root / name).write_text("x", encoding="utf-8")

            removed = clean_old_logs(root, RecordingLogger())
            remaining = sorted(p.name for p in root.iterdir())

        self.assertEqual(removed, 1)
        self.assertEqual(remaining, sorted([f"Log_{recent}.log", "Log_notadate.log", "other.txt"]))

    def test_missing_directory_is_skipped(self):
        logger = RecordingLogger()
        self.assertEqual(clean_old_logs("/nonexistent/log/dir", logger), 0)
        self.assertTrue(logger.messages("WARNING"))


if __name__ == "__main__":
    unittest.main()
