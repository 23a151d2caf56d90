import json
import os
import shutil
import sys
import tempfile
import unittest

sys.path.append(os.path.abspath(os.path.join(os.path.dirname(__file__), "..")))

from settings import Settings


class TestSettings(unittest.TestCase):
    def setUp(self):
        self.config_dir = tempfile.mkdtemp()
        self.settings = Settings(config_dir=self.config_dir)

    def tearDown(self):
        shutil.rmtree(self.config_dir)

    def test_defaults(self):
        self.assertEqual(self.settings.get_zoom_range(), (0.1, 5.0))
        self.assertEqual(self.settings.get_zoom_step(), 0.15)
        self.assertIsNone(self.settings.get_last_repository())
        self.assertEqual(self.settings.get_recent_repositories(), [])

    def test_recent_repositories_are_saved(self):
        self.settings.add_recent_repository("/repo/a")
        self.settings.add_recent_repository("/repo/b")
        self.settings.add_recent_repository("/repo/a")

        reloaded = Settings(config_dir=self.config_dir)
        self.assertEqual(reloaded.get_recent_repositories(), ["/repo/a", "/repo/b"])
        self.assertEqual(reloaded.get_last_repository(), "/repo/a")

    def test_recent_repositories_are_capped(self):
        self.settings.settings["max_recent"] = 3
        for i in range(5):
            self.settings.add_recent_repository(f"/repo/{i}")
        self.assertEqual(self.settings.get_recent_repositories(), ["/repo/4", "/repo/3", "/repo/2"])

    def test_invalid_zoom_range_falls_back_to_defaults(self):
        with open(os.path.join(self.config_dir, "settings.json"), "w", encoding="utf-8") as f:
            json.dump({"zoom_min": 3.0, "zoom_max": 1.0}, f)
        self.assertEqual(Settings(config_dir=self.config_dir).get_zoom_range(), (0.1, 5.0))

    def test_corrupt_file_keeps_defaults(self):
        with open(os.path.join(self.config_dir, "settings.json"), "w", encoding="utf-8") as f:
            f.write("{not json")
        self.assertEqual(Settings(config_dir=self.config_dir).get_window_size(), (1200, 800))

    def test_window_size(self):
        self.settings.save_window_size(640, 480)
        self.assertEqual(Settings(config_dir=self.config_dir).get_window_size(), (640, 480))


if __name__ == "__main__":
    unittest.main()
