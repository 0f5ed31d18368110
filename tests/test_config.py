"""Tests for configuration loading and validation."""

from __future__ import annotations

import dataclasses
import shutil
import tempfile
import unittest
from pathlib import Path

from uptimechamps.config.settings import (
    DEFAULT_CACHE_PATH,
    DEFAULT_CONFIG_FILE,
    CacheConfig,
    ConfigurationError,
    JamfConfig,
    ReportConfig,
    Settings,
    _apply_environment_overrides,
    _validate_config,
    get_config_path,
    load_config,
)


class ConfigTestCase(unittest.TestCase):
    """Base class with a temporary directory for config and .env files."""

    def setUp(self) -> None:
        self.temp_dir = tempfile.mkdtemp()
        self.config_path = Path(self.temp_dir) / "config.yaml"
        self.env_file = Path(self.temp_dir) / ".env"

    def tearDown(self) -> None:
        shutil.rmtree(self.temp_dir, ignore_errors=True)

    def load(self, environ: dict[str, str] | None = None) -> Settings:
        return load_config(
            config_path=self.config_path,
            env_file=self.env_file,
            environ=environ or {},
        )


class TestSettingsDefaults(unittest.TestCase):
    """Tests for default values."""

    def test_defaults(self) -> None:
        """Test the built-in defaults."""
        settings = Settings()

        self.assertEqual(settings.log_level, "WARNING")
        self.assertEqual(settings.report.attribute_name, "Uptime")
        self.assertEqual(settings.report.display_top_k, 25)
        self.assertEqual(settings.cache.max_age_days, 14)
        self.assertEqual(settings.cache.top_n, 50)
        self.assertEqual(settings.cache_path, DEFAULT_CACHE_PATH)
        self.assertEqual(settings.jamf.timeout, 30.0)

    def test_settings_are_frozen(self) -> None:
        """Test settings cannot be mutated after loading."""
        settings = Settings()

        with self.assertRaises(dataclasses.FrozenInstanceError):
            settings.log_level = "DEBUG"  # type: ignore[misc]

    def test_secret_not_in_repr(self) -> None:
        """Test the client secret is kept out of repr output."""
        config = JamfConfig(url="x", client_id="id", client_secret="hunter2")

        self.assertNotIn("hunter2", repr(config))

    def test_cache_path_expands_user(self) -> None:
        settings = Settings(cache=CacheConfig(path="~/uptime/cache.txt"))

        self.assertEqual(settings.cache_path, Path.home() / "uptime" / "cache.txt")


class TestGetConfigPath(unittest.TestCase):
    """Tests for get_config_path."""

    def test_default_path(self) -> None:
        self.assertEqual(get_config_path({}), DEFAULT_CONFIG_FILE)

    def test_env_override(self) -> None:
        """Test UPTIMECHAMPS_CONFIG selects the config file."""
        path = get_config_path({"UPTIMECHAMPS_CONFIG": "/etc/uptimechamps.yaml"})

        self.assertEqual(path, Path("/etc/uptimechamps.yaml"))


class TestLoadConfig(ConfigTestCase):
    """Tests for load_config."""

    def test_missing_files_give_defaults(self) -> None:
        """Test a missing config file and .env are not errors."""
        self.assertEqual(self.load(), Settings())

    def test_yaml_values(self) -> None:
        """Test values are read from the YAML file."""
        self.config_path.write_text(
            "log_level: info\n"
            "jamf:\n"
            "  url: https://acme.jamfcloud.com\n"
            "  timeout: 10\n"
            "  request_delay: 0.5\n"
            "cache:\n"
            "  path: /tmp/uptime/cache.txt\n"
            "  max_age_days: 7\n"
            "  top_n: 20\n"
            "report:\n"
            "  attribute_name: Last Boot\n"
            "  display_top_k: 10\n"
        )

        settings = self.load()

        self.assertEqual(settings.log_level, "INFO")
        self.assertEqual(settings.jamf.url, "https://acme.jamfcloud.com")
        self.assertEqual(settings.jamf.timeout, 10.0)
        self.assertEqual(settings.jamf.request_delay, 0.5)
        self.assertEqual(settings.cache.path, "/tmp/uptime/cache.txt")
        self.assertEqual(settings.cache.max_age_days, 7)
        self.assertEqual(settings.cache.top_n, 20)
        self.assertEqual(settings.report.attribute_name, "Last Boot")
        self.assertEqual(settings.report.display_top_k, 10)

    def test_empty_yaml(self) -> None:
        """Test an empty YAML file gives defaults."""
        self.config_path.write_text("")

        self.assertEqual(self.load(), Settings())

    def test_invalid_yaml(self) -> None:
        """Test malformed YAML raises ConfigurationError."""
        self.config_path.write_text("jamf: [unclosed\n")

        with self.assertRaises(ConfigurationError):
            self.load()

    def test_yaml_not_a_mapping(self) -> None:
        self.config_path.write_text("- just\n- a list\n")

        with self.assertRaises(ConfigurationError):
            self.load()

    def test_yaml_null_values_keep_defaults(self) -> None:
        """Test empty YAML values do not become the string "None"."""
        self.config_path.write_text(
            "log_level:\n"
            "jamf:\n"
            "  url: null\n"
            "  timeout: 15\n"
            "cache:\n"
            "  path:\n"
            "report:\n"
        )

        settings = self.load()

        self.assertEqual(settings.jamf.url, "")
        self.assertEqual(settings.jamf.timeout, 15.0)
        self.assertEqual(settings.cache.path, str(DEFAULT_CACHE_PATH))
        self.assertEqual(settings.log_level, "WARNING")
        self.assertEqual(settings.report, ReportConfig())

    def test_yaml_section_not_a_mapping(self) -> None:
        self.config_path.write_text("cache: /tmp/cache.txt\n")

        with self.assertRaises(ConfigurationError):
            self.load()

    def test_yaml_bad_number(self) -> None:
        """Test a non-numeric value for a numeric field is rejected."""
        self.config_path.write_text("cache:\n  top_n: lots\n")

        with self.assertRaises(ConfigurationError):
            self.load()

    def test_dotenv_credentials(self) -> None:
        """Test credentials are read from the .env file."""
        self.env_file.write_text(
            "JAMF_URL=https://acme.jamfcloud.com\n"
            "JAMF_CLIENT_ID=abc\n"
            'JAMF_CLIENT_SECRET="s3cret"\n'
        )

        settings = self.load()

        self.assertEqual(settings.jamf.url, "https://acme.jamfcloud.com")
        self.assertEqual(settings.jamf.client_id, "abc")
        self.assertEqual(settings.jamf.client_secret, "s3cret")

    def test_environment_beats_dotenv_and_yaml(self) -> None:
        """Test precedence: environment over .env over YAML."""
        self.config_path.write_text("jamf:\n  url: https://yaml.example.com\n")
        self.env_file.write_text("JAMF_URL=https://dotenv.example.com\nJAMF_CLIENT_ID=from-dotenv\n")

        settings = self.load({"JAMF_URL": "https://env.example.com"})

        self.assertEqual(settings.jamf.url, "https://env.example.com")
        self.assertEqual(settings.jamf.client_id, "from-dotenv")

    def test_dotenv_beats_yaml(self) -> None:
        self.config_path.write_text("jamf:\n  url: https://yaml.example.com\n")
        self.env_file.write_text("JAMF_URL=https://dotenv.example.com\n")

        self.assertEqual(self.load().jamf.url, "https://dotenv.example.com")

    def test_environment_overrides(self) -> None:
        """Test the UPTIMECHAMPS_* overrides."""
        settings = self.load({
            "UPTIMECHAMPS_ATTRIBUTE_NAME": "Boot Time",
            "UPTIMECHAMPS_CACHE_PATH": "/var/tmp/cache.txt",
            "UPTIMECHAMPS_CACHE_MAX_AGE_DAYS": "3",
            "UPTIMECHAMPS_CACHE_TOP_N": "5",
            "UPTIMECHAMPS_DISPLAY_TOP_K": "4",
            "UPTIMECHAMPS_LOG_LEVEL": "debug",
        })

        self.assertEqual(settings.report.attribute_name, "Boot Time")
        self.assertEqual(settings.cache.path, "/var/tmp/cache.txt")
        self.assertEqual(settings.cache.max_age_days, 3)
        self.assertEqual(settings.cache.top_n, 5)
        self.assertEqual(settings.report.display_top_k, 4)
        self.assertEqual(settings.log_level, "DEBUG")

    def test_empty_environment_value_ignored(self) -> None:
        """Test an empty variable does not clear a configured value."""
        self.env_file.write_text("JAMF_CLIENT_ID=abc\n")

        settings = self.load({"JAMF_CLIENT_ID": ""})

        self.assertEqual(settings.jamf.client_id, "abc")

    def test_invalid_environment_number(self) -> None:
        with self.assertRaises(ConfigurationError):
            self.load({"UPTIMECHAMPS_CACHE_TOP_N": "fifty"})

    def test_invalid_values_rejected(self) -> None:
        """Test validation runs on the merged settings."""
        for environ in [
            {"UPTIMECHAMPS_CACHE_TOP_N": "0"},
            {"UPTIMECHAMPS_CACHE_MAX_AGE_DAYS": "0"},
            {"UPTIMECHAMPS_DISPLAY_TOP_K": "-1"},
            {"UPTIMECHAMPS_LOG_LEVEL": "LOUD"},
            {"UPTIMECHAMPS_ATTRIBUTE_NAME": "   "},
        ]:
            with self.subTest(environ=environ):
                with self.assertRaises(ConfigurationError):
                    self.load(environ)


class TestEnvironmentOverrides(unittest.TestCase):
    """Tests for _apply_environment_overrides."""

    def test_returns_new_settings(self) -> None:
        """Test overrides produce a copy and leave the input untouched."""
        original = Settings()

        updated = _apply_environment_overrides(original, {"JAMF_CLIENT_ID": "abc"})

        self.assertEqual(updated.jamf.client_id, "abc")
        self.assertEqual(original.jamf.client_id, "")

    def test_values_are_stripped(self) -> None:
        updated = _apply_environment_overrides(Settings(), {"UPTIMECHAMPS_CACHE_TOP_N": " 12 "})

        self.assertEqual(updated.cache.top_n, 12)


class TestValidateConfig(unittest.TestCase):
    """Tests for _validate_config."""

    def test_defaults_are_valid(self) -> None:
        _validate_config(Settings())

    def test_display_may_exceed_cache_size(self) -> None:
        """Test display_top_k larger than top_n is allowed."""
        _validate_config(
            Settings(cache=CacheConfig(top_n=10), report=ReportConfig(display_top_k=25))
        )

    def test_negative_delay(self) -> None:
        with self.assertRaises(ConfigurationError):
            _validate_config(Settings(jamf=JamfConfig(request_delay=-1)))

    def test_zero_timeout(self) -> None:
        with self.assertRaises(ConfigurationError):
            _validate_config(Settings(jamf=JamfConfig(timeout=0)))


class TestRequireCredentials(unittest.TestCase):
    """Tests for Settings.require_credentials."""

    def test_complete_credentials(self) -> None:
        settings = Settings(jamf=JamfConfig(url="u", client_id="i", client_secret="s"))

        settings.require_credentials()

    def test_missing_credentials_named(self) -> None:
        """Test every missing variable is named in the error."""
        settings = Settings(jamf=JamfConfig(url="https://acme.jamfcloud.com"))

        with self.assertRaises(ConfigurationError) as cm:
            settings.require_credentials()

        self.assertIn(
            "Missing required Jamf credentials: JAMF_CLIENT_ID, JAMF_CLIENT_SECRET.",
            str(cm.exception),
        )


if __name__ == "__main__":
    unittest.main()
