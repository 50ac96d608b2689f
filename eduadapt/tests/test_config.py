import json
import os
import tempfile
import unittest
from unittest.mock import patch

from pydantic import ValidationError

from eduadapt.common.config import (
    AllocationConfig,
    ConfigLoader,
    EngineConfig,
    GradingConfig,
    LevelConfig,
    LoggingConfig,
    MixConfig,
    reload_config,
)
from eduadapt.common.exceptions import ConfigurationError


def clean_environ():
    """Environment without any engine overrides."""
    return {k: v for k, v in os.environ.items() if not k.upper().startswith("EDUADAPT_")}


class TestConfigModels(unittest.TestCase):
    """Test configuration defaults and validation."""

    def test_defaults(self):
        """Test documented default values."""
        with patch.dict(os.environ, clean_environ(), clear=True):
            config = EngineConfig()
        self.assertEqual(config.grading.keyword_overlap_threshold, 0.65)
        self.assertEqual(config.grading.edit_similarity_threshold, 0.75)
        self.assertEqual(config.levels.beginner_easy_accuracy, 0.70)
        self.assertEqual(config.allocation.beginner.easy, 0.60)
        self.assertEqual(config.allocation.boost_min_attempts, 5)
        self.assertEqual(config.scoring.unseen_score, 100.0)
        self.assertEqual(config.scoring.weakness_weight, 80.0)
        self.assertEqual(config.cache.default_ttl, 300.0)
        self.assertEqual(config.session.default_question_count, 10)

    def test_fraction_validation(self):
        """Test thresholds and cut-offs must be fractions."""
        with self.assertRaises(ValidationError):
            GradingConfig(keyword_overlap_threshold=1.5)
        with self.assertRaises(ValidationError):
            LevelConfig(advanced_hard_accuracy=-0.1)
        with self.assertRaises(ValidationError):
            MixConfig(easy=0, medium=0, hard=0)

    def test_log_level(self):
        """Test log levels are validated and upper-cased."""
        self.assertEqual(LoggingConfig(level="debug").level, "DEBUG")
        with self.assertRaises(ValidationError):
            LoggingConfig(level="chatty")

    def test_base_for_unknown_level(self):
        """Test looking up a missing allocation row."""
        self.assertEqual(AllocationConfig().base_for("advanced").hard, 0.40)
        with self.assertRaises(ConfigurationError):
            AllocationConfig().base_for("expert")

    def test_environment_overrides(self):
        """Test nested environment variables override file values."""
        env = clean_environ()
        env["EDUADAPT_GRADING__EDIT_SIMILARITY_THRESHOLD"] = "0.8"
        with patch.dict(os.environ, env, clear=True):
            config = EngineConfig(grading={"edit_similarity_threshold": 0.7, "min_token_length": 3})
        self.assertEqual(config.grading.edit_similarity_threshold, 0.8)
        self.assertEqual(config.grading.min_token_length, 3)


class TestConfigLoader(unittest.TestCase):
    """Test loading configuration files."""

    def setUp(self):
        self.tmpdir = tempfile.TemporaryDirectory()
        self.env = patch.dict(os.environ, clean_environ(), clear=True)
        self.env.start()

    def tearDown(self):
        self.env.stop()
        self.tmpdir.cleanup()

    def write(self, name: str, content: str) -> str:
        path = os.path.join(self.tmpdir.name, name)
        with open(path, "w", encoding="utf-8") as f:
            f.write(content)
        return path

    def test_yaml_file(self):
        """Test values from a YAML file."""
        path = self.write("engine.yaml", "levels:\n  beginner_easy_accuracy: 0.6\nsession:\n  default_question_count: 4\n")
        config = ConfigLoader(path).load()
        self.assertEqual(config.levels.beginner_easy_accuracy, 0.6)
        self.assertEqual(config.session.default_question_count, 4)
        self.assertEqual(config.levels.advanced_hard_accuracy, 0.50)

    def test_json_file(self):
        """Test values from a JSON file."""
        path = self.write("engine.json", json.dumps({"scoring": {"recency_cap": 30}}))
        self.assertEqual(ConfigLoader(path).load().scoring.recency_cap, 30.0)

    def test_config_path_from_environment(self):
        """Test the file path can come from the environment."""
        path = self.write("engine.yml", "cache:\n  enabled: false\n")
        with patch.dict(os.environ, {"EDUADAPT_CONFIG_PATH": path}):
            self.assertFalse(ConfigLoader().load().cache.enabled)

    def test_missing_file_uses_defaults(self):
        """Test a missing file falls back to defaults."""
        config = ConfigLoader(os.path.join(self.tmpdir.name, "absent.yaml")).load()
        self.assertEqual(config.grading.keyword_overlap_threshold, 0.65)

    def test_invalid_files(self):
        """Test malformed files raise ConfigurationError."""
        bad_yaml = self.write("bad.yaml", "levels: [unclosed\n")
        bad_value = self.write("value.yaml", "grading:\n  keyword_overlap_threshold: 2\n")
        not_mapping = self.write("list.yaml", "- a\n- b\n")
        unsupported = self.write("engine.txt", "anything")

        for path in (bad_yaml, bad_value, not_mapping, unsupported):
            with self.assertRaises(ConfigurationError):
                ConfigLoader(path).load()

    def test_reload_config(self):
        """Test reloading swaps the process-wide configuration."""
        path = self.write("engine.yaml", "session:\n  default_question_count: 7\n")
        try:
            self.assertEqual(reload_config(path).session.default_question_count, 7)
        finally:
            reload_config()
