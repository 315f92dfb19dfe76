"""
Behave environment configuration for DNS Migrator integration tests.
"""

import logging
import shutil
from pathlib import Path

import yaml

logging.basicConfig(level=logging.INFO)
logger = logging.getLogger(__name__)


def before_all(context):
    """Set up test environment before all tests."""
    context.base_dir = Path(__file__).parent.parent
    context.test_data_dir = context.base_dir / "test_data"
    context.test_data_dir.mkdir(exist_ok=True)

    context.test_zone = "test.example.com"
    context.old_ip = "203.0.113.10"
    context.new_ip = "198.51.100.20"

    context.test_config = {
        "dns_providers": {"mock": {}},
        "default_provider": "mock",
        "migration": {"verify_old_value": False, "poll_interval": 0.05},
        "logging": {"level": "DEBUG", "file": "test_dns_migrator.log"},
    }

    context.test_config_file = context.test_data_dir / "test_config.yaml"
    with open(context.test_config_file, "w") as f:
        yaml.dump(context.test_config, f)

    logger.info("Test environment setup complete")


def before_scenario(context, scenario):
    """Set up each test scenario."""
    context.scenario_name = scenario.name
    context.job_ids = []
    logger.info(f"Starting scenario: {scenario.name}")


def after_scenario(context, scenario):
    """Wait for any job still running so threads never outlive a scenario."""
    engine = getattr(getattr(context, "dns_manager", None), "engine", None)
    for job_id in context.job_ids:
        if engine and not engine.wait(job_id, timeout=5):
            logger.warning(f"Job {job_id} still running after scenario")

    if hasattr(context, "dns_manager"):
        context.dns_manager.close()
        del context.dns_manager

    logger.info(f"Completed scenario: {scenario.name}")


def after_all(context):
    """Clean up test environment after all tests."""
    try:
        if context.test_data_dir.exists():
            shutil.rmtree(context.test_data_dir)
    except OSError as e:
        logger.warning(f"Failed to cleanup test data: {e}")

    logger.info("Test environment cleanup complete")
