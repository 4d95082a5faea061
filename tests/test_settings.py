from __future__ import annotations

from pathlib import Path
import tempfile
import unittest

from flame.settings import FlameConfig, SettingsError, describe_config, load_settings, switch_target


class LoadSettingsTest(unittest.TestCase):
    def test_defaults_with_project_only(self) -> None:
        settings = load_settings(env={"FLAME_PROJECT_ID": "demo-project"}, dotenv_path="does-not-exist.env")

        self.assertEqual(settings.project, "demo-project")
        self.assertTrue(settings.use_emulator)
        self.assertEqual(settings.emulator_host, "127.0.0.1")
        self.assertEqual(settings.emulator_port, 8080)
        self.assertEqual(settings.target, "emulator")

    def test_env_override(self) -> None:
        settings = load_settings(
            env={
                "FLAME_PROJECT_ID": "demo-project",
                "FLAME_USE_EMULATOR": "false",
                "FLAME_EMULATOR_HOST": "localhost",
                "FLAME_EMULATOR_PORT": "9090",
            },
            dotenv_path="does-not-exist.env",
        )

        self.assertFalse(settings.use_emulator)
        self.assertEqual(settings.emulator_address, "localhost:9090")
        self.assertEqual(settings.target, "remote")

    def test_google_cloud_project_fallback(self) -> None:
        settings = load_settings(env={"GOOGLE_CLOUD_PROJECT": "gcp-project"}, dotenv_path="does-not-exist.env")

        self.assertEqual(settings.project, "gcp-project")

    def test_dotenv_loaded_when_env_missing(self) -> None:
        with tempfile.TemporaryDirectory() as tmpdir:
            dotenv = Path(tmpdir) / ".env"
            dotenv.write_text(
                "# flame\nFLAME_PROJECT_ID='from-dotenv'\nFLAME_EMULATOR_PORT=8181\n",
                encoding="utf-8",
            )

            settings = load_settings(env={}, dotenv_path=dotenv)

        self.assertEqual(settings.project, "from-dotenv")
        self.assertEqual(settings.emulator_port, 8181)

    def test_env_has_priority_over_dotenv(self) -> None:
        with tempfile.TemporaryDirectory() as tmpdir:
            dotenv = Path(tmpdir) / ".env"
            dotenv.write_text("FLAME_PROJECT_ID=from-dotenv\n", encoding="utf-8")

            settings = load_settings(env={"FLAME_PROJECT_ID": "from-env"}, dotenv_path=dotenv)

        self.assertEqual(settings.project, "from-env")

    def test_missing_project_raises(self) -> None:
        with self.assertRaises(SettingsError):
            load_settings(env={}, dotenv_path="does-not-exist.env")

    def test_invalid_values_raise(self) -> None:
        invalid = [
            {"FLAME_USE_EMULATOR": "maybe"},
            {"FLAME_EMULATOR_PORT": "abc"},
            {"FLAME_EMULATOR_PORT": "70000"},
            {"FLAME_EMULATOR_HOST": " "},
        ]
        for overrides in invalid:
            with self.subTest(overrides=overrides):
                with self.assertRaises(SettingsError):
                    load_settings(env={"FLAME_PROJECT_ID": "demo", **overrides}, dotenv_path="does-not-exist.env")

    def test_empty_host_allowed_for_remote(self) -> None:
        settings = load_settings(
            env={"FLAME_PROJECT_ID": "demo", "FLAME_USE_EMULATOR": "no", "FLAME_EMULATOR_HOST": ""},
            dotenv_path="does-not-exist.env",
        )

        self.assertFalse(settings.use_emulator)


class SwitchTargetTest(unittest.TestCase):
    def test_switch_between_targets(self) -> None:
        config = FlameConfig(project="demo")

        remote = switch_target(config, "remote")
        emulator = switch_target(remote, "EMULATOR")

        self.assertFalse(remote.use_emulator)
        self.assertTrue(emulator.use_emulator)
        self.assertTrue(config.use_emulator)

    def test_unknown_target_raises(self) -> None:
        with self.assertRaises(SettingsError):
            switch_target(FlameConfig(project="demo"), "staging")

    def test_describe_config(self) -> None:
        lines = describe_config(FlameConfig(project="demo", use_emulator=False))

        self.assertEqual(
            lines,
            ["Firebase project: demo", "Using emulator? No", "Emulator host & port: 127.0.0.1:8080"],
        )


if __name__ == "__main__":
    unittest.main()
