import os
import tempfile
import unittest
from pathlib import Path

import yaml

from dockshift.config import Settings, load_settings, render_default_config
from dockshift.core.errors import ValidationError
from dockshift.resources import default_config_path, default_profiles_dir


class TestSettings(unittest.TestCase):
    def test_missing_file_yields_defaults(self) -> None:
        with tempfile.TemporaryDirectory() as td:
            s = load_settings(Path(td) / "config.yml")
            self.assertEqual(s, Settings())

    def test_values_are_loaded(self) -> None:
        with tempfile.TemporaryDirectory() as td:
            p = Path(td) / "config.yml"
            p.write_text(
                "dockutil_path: /opt/dockutil\n"
                "candidate_paths: []\n"
                "include_others: true\n"
                "add_delay_s: 0\n"
                "restart_poll:\n"
                "  max_attempts: 4\n"
                "  interval_s: 0.25\n",
                encoding="utf-8",
            )
            s = load_settings(p)
            self.assertEqual(s.dockutil_path, "/opt/dockutil")
            self.assertEqual(s.candidate_paths, ())
            self.assertTrue(s.include_others)
            self.assertEqual(s.add_delay_s, 0.0)
            self.assertEqual(s.restart_policy.max_attempts, 4)
            self.assertEqual(s.restart_policy.interval_s, 0.25)
            self.assertEqual(s.restart_policy.timeout_s, Settings().restart_policy.timeout_s)

    def test_unknown_key_is_rejected(self) -> None:
        with tempfile.TemporaryDirectory() as td:
            p = Path(td) / "config.yml"
            p.write_text("add_delay: 1\n", encoding="utf-8")
            with self.assertRaises(ValidationError) as ctx:
                load_settings(p)
            self.assertEqual(ctx.exception.code, "config.invalid")

    def test_negative_delay_is_rejected(self) -> None:
        with self.assertRaises(ValidationError):
            Settings.from_dict({"add_delay_s": -1})

    def test_rendered_default_round_trips(self) -> None:
        raw = yaml.safe_load(render_default_config())
        self.assertEqual(Settings.from_dict(raw), Settings())


class TestResourcePaths(unittest.TestCase):
    def setUp(self) -> None:
        self._saved = {k: os.environ.get(k) for k in ("DOCKSHIFT_CONFIG", "DOCKSHIFT_HOME", "XDG_CONFIG_HOME")}

    def tearDown(self) -> None:
        for k, v in self._saved.items():
            if v is None:
                os.environ.pop(k, None)
            else:
                os.environ[k] = v

    def test_env_overrides(self) -> None:
        os.environ["DOCKSHIFT_CONFIG"] = "/tmp/x/config.yml"
        os.environ["DOCKSHIFT_HOME"] = "/tmp/y"
        self.assertEqual(default_config_path(), Path("/tmp/x/config.yml"))
        self.assertEqual(default_profiles_dir(), Path("/tmp/y/profiles"))

    def test_xdg_config_home(self) -> None:
        os.environ.pop("DOCKSHIFT_CONFIG", None)
        os.environ.pop("DOCKSHIFT_HOME", None)
        os.environ["XDG_CONFIG_HOME"] = "/tmp/xdg"
        self.assertEqual(default_config_path(), Path("/tmp/xdg/dockshift/config.yml"))
        self.assertEqual(default_profiles_dir(), Path("/tmp/xdg/dockshift/profiles"))


if __name__ == "__main__":
    unittest.main()
