from __future__ import annotations

import logging
import os
import tempfile
import unittest
from pathlib import Path
from unittest import mock

from pydantic import ValidationError

from doubansync.config import get_scheduler_settings, get_transform_settings, load_env_files
from doubansync.domain.transform import TransformContext
from doubansync.logging_utils import configure_script_logging
from doubansync.schemas.transform import TransformOptions, TransformStatsContract


class TestSettings(unittest.TestCase):
    def setUp(self) -> None:
        get_scheduler_settings.cache_clear()
        get_transform_settings.cache_clear()

    def tearDown(self) -> None:
        get_scheduler_settings.cache_clear()
        get_transform_settings.cache_clear()

    def test_defaults(self) -> None:
        with mock.patch.dict("os.environ", {}, clear=True):
            settings = get_scheduler_settings()

        self.assertEqual(settings.base_delay_ms, 4000.0)
        self.assertEqual(settings.slow_mode_threshold, 200)
        self.assertEqual(settings.max_retries, 3)
        self.assertEqual(settings.accept_language, "zh-CN,zh;q=0.9")

    def test_environment_overrides_are_clamped(self) -> None:
        env = {
            "DOUBAN_SCRAPE_MAX_RETRIES": "0",
            "DOUBAN_SCRAPE_BASE_DELAY_MS": "not-a-number",
            "DOUBAN_SCRAPE_RETRY_BACKOFF_MIN_MS": "8000",
            "DOUBAN_SCRAPE_RETRY_BACKOFF_MAX_MS": "2000",
            "DOUBAN_SCRAPE_USER_AGENT": "   ",
            "DOUBAN_TRANSFORM_BATCH_SIZE": "5000",
        }
        with mock.patch.dict("os.environ", env, clear=True):
            scheduler = get_scheduler_settings()
            transform = get_transform_settings()

        self.assertEqual(scheduler.max_retries, 1)
        self.assertEqual(scheduler.base_delay_ms, 4000.0)
        self.assertEqual(scheduler.retry_backoff_min_ms, 8000.0)
        self.assertEqual(scheduler.retry_backoff_max_ms, 8000.0)
        self.assertIn("Chrome", scheduler.user_agent)
        self.assertEqual(transform.batch_size, 1000)


class TestEnvFiles(unittest.TestCase):
    def test_env_files_do_not_override_process_environment(self) -> None:
        with tempfile.TemporaryDirectory() as directory:
            root = Path(directory)
            (root / ".env").write_text(
                "# pacing\n"
                "DOUBAN_SCRAPE_BASE_DELAY_MS=1500\n"
                "export DOUBAN_SCRAPE_USER_AGENT='TestAgent/1.0'\n"
                "DOUBAN_SCRAPE_MAX_RETRIES=9\n"
                "not a pair\n",
                encoding="utf-8",
            )
            (root / ".env.local").write_text('DOUBAN_TRANSFORM_BATCH_SIZE="25"\n', encoding="utf-8")

            with mock.patch.dict("os.environ", {"DOUBAN_SCRAPE_MAX_RETRIES": "2"}, clear=True):
                applied = load_env_files(root)
                retries = os.environ["DOUBAN_SCRAPE_MAX_RETRIES"]

        self.assertEqual(
            applied,
            {
                "DOUBAN_SCRAPE_BASE_DELAY_MS": "1500",
                "DOUBAN_SCRAPE_USER_AGENT": "TestAgent/1.0",
                "DOUBAN_TRANSFORM_BATCH_SIZE": "25",
            },
        )
        self.assertEqual(retries, "2")


class TestScriptLogging(unittest.TestCase):
    def test_unknown_level_falls_back_to_default(self) -> None:
        with mock.patch.dict("os.environ", {"DOUBAN_SYNC_LOG_LEVEL": "chatty"}), mock.patch(
            "logging.basicConfig"
        ) as basic_config:
            level = configure_script_logging("INFO")

        self.assertEqual(level, logging.INFO)
        self.assertEqual(basic_config.call_args.kwargs["level"], logging.INFO)

    def test_level_is_read_from_environment(self) -> None:
        with mock.patch.dict("os.environ", {"DOUBAN_SYNC_LOG_LEVEL": "debug"}), mock.patch("logging.basicConfig"):
            self.assertEqual(configure_script_logging(), logging.DEBUG)


class TestTransformContracts(unittest.TestCase):
    def test_options_accept_camel_and_snake_case(self) -> None:
        camel = TransformOptions.model_validate({"preserveRawData": True})
        snake = TransformOptions.model_validate({"preserve_raw_data": True})

        self.assertTrue(camel.preserve_raw_data)
        self.assertTrue(snake.preserve_raw_data)
        self.assertTrue(camel.enable_intelligent_repairs)
        self.assertTrue(camel.strict_validation)

    def test_options_reject_unknown_keys_and_non_booleans(self) -> None:
        with self.assertRaises(ValidationError):
            TransformOptions.model_validate({"verbose": True})
        with self.assertRaises(ValidationError):
            TransformOptions.model_validate({"strictValidation": "false"})

    def test_stats_contract_rejects_overcounted_fields(self) -> None:
        with self.assertRaises(ValidationError):
            TransformStatsContract(total_fields=2, transformed_fields=2, repaired_fields=0, failed_fields=1)

    def test_context_snapshot(self) -> None:
        context = TransformContext(content_type="books")
        context.total_fields = 17
        context.transformed_fields = 4
        context.warn("required field title is empty")

        stats = context.snapshot()

        self.assertEqual(stats.total_fields, 17)
        self.assertEqual(stats.transformed_fields, 4)
        self.assertEqual(context.warnings, ["required field title is empty"])


if __name__ == "__main__":
    unittest.main()
