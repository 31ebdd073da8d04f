import json
import sys
import tempfile
import unittest
from pathlib import Path

ROOT = Path(__file__).resolve().parents[2]
sys.path.insert(0, str(ROOT))

from nvidia_monitor.config import read_monitor_config
from nvidia_monitor.gpu import ProviderKind

try:
    from nvidia_monitor.settings import Settings
except Exception:  # pragma: no cover
    Settings = None


class SettingsTests(unittest.TestCase):
    def setUp(self):
        if Settings is None:
            self.skipTest("PyGObject not installed")

    def test_defaults_when_missing(self):
        with tempfile.TemporaryDirectory() as tmp:
            settings = Settings(Path(tmp))
            self.assertEqual(settings.get("refreshrate"), 5)
            self.assertEqual(settings.get("provider"), 0)
            self.assertIsNone(settings.get("not-a-setting"))
            cfg = read_monitor_config(settings)
            self.assertIs(cfg.provider_kind, ProviderKind.SETTINGS_AND_SMI)

    def test_save_and_reload(self):
        with tempfile.TemporaryDirectory() as tmp:
            settings = Settings(Path(tmp))
            settings.set("provider", 3)
            settings.set("tempformat", 1)
            reloaded = Settings(Path(tmp))
            self.assertEqual(reloaded.get("provider"), 3)
            self.assertEqual(reloaded.get("tempformat"), 1)

    def test_invalid_file_keeps_defaults(self):
        with tempfile.TemporaryDirectory() as tmp:
            (Path(tmp) / "settings.json").write_text("{not json", encoding="utf-8")
            with self.assertLogs("nvidia_monitor.settings", level="WARNING"):
                settings = Settings(Path(tmp))
            self.assertEqual(settings.get("tempformat"), 0)

    def test_reset(self):
        with tempfile.TemporaryDirectory() as tmp:
            path = Path(tmp) / "settings.json"
            path.write_text(json.dumps({"refreshrate": 9}), encoding="utf-8")
            settings = Settings(Path(tmp))
            self.assertEqual(settings.get("refreshrate"), 9)
            settings.reset()
            self.assertEqual(json.loads(path.read_text(encoding="utf-8"))["refreshrate"], 5)


if __name__ == "__main__":
    unittest.main()
