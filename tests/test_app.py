import contextlib
import io
import json
import tempfile
import unittest
from pathlib import Path
from unittest import mock

from fluentme import app


class TestCli(unittest.TestCase):
    def setUp(self):
        self.tmp = tempfile.TemporaryDirectory()
        self.profile = str(Path(self.tmp.name) / "profile.json")
        patcher = mock.patch("fluentme.app.setup_logging")
        patcher.start()
        self.addCleanup(patcher.stop)

    def tearDown(self):
        self.tmp.cleanup()

    def run_main(self, *argv):
        out = io.StringIO()
        with contextlib.redirect_stdout(out):
            code = app.main(list(argv))
        return code, out.getvalue()

    def test_show_profile(self):
        Path(self.profile).write_text(json.dumps({"scores": {"read": 88}}), encoding="utf-8")
        code, out = self.run_main("--show-profile", "--profile", self.profile)
        self.assertEqual(code, 0)
        self.assertIn("read", out)
        self.assertIn("88", out)

    def test_invalid_assessment(self):
        code, out = self.run_main("--skill", "dance", "--profile", self.profile)
        self.assertEqual(code, 2)
        self.assertIn("Invalid Assessment", out)

    def test_missing_microphone(self):
        from fluentme.errors import DeviceUnavailable
        with mock.patch("fluentme.app.build_audio_source", side_effect=DeviceUnavailable("no mic")):
            code, out = self.run_main("--skill", "read", "--no-asr", "--profile", self.profile)
        self.assertEqual(code, 1)
        self.assertIn("Microphone unavailable", out)

    def test_quit_immediately_prints_overview(self):
        with mock.patch("fluentme.app.build_audio_source"), \
                mock.patch("builtins.input", return_value="q"):
            code, out = self.run_main("--skill", "word", "--no-asr", "--profile", self.profile)
        self.assertEqual(code, 0)
        self.assertIn("Say this word:", out)
        self.assertIn("Samples: 0", out)

    def test_save_recordings_leaves_global_config(self):
        from fluentme.config import cfg
        before = cfg.recordings_dir
        out_dir = str(Path(self.tmp.name) / "takes")
        with mock.patch("fluentme.app.run_practice", return_value=0) as run_practice:
            code, _ = self.run_main("--skill", "read", "--save-recordings", out_dir, "--profile", self.profile)
        self.assertEqual(code, 0)
        config = run_practice.call_args[0][3]
        self.assertEqual(config.recordings_dir, out_dir)
        self.assertIsNot(config, cfg)
        self.assertEqual(cfg.recordings_dir, before)


if __name__ == '__main__':
    unittest.main()
