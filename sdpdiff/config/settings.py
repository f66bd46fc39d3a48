"""
Configuration loader for the SDP parser comparator

Merges built-in defaults, an optional YAML settings file and environment
variables, then validates the result against the bundled JSON schema.
"""

import json
import logging
import os
from pathlib import Path
from typing import Any, Dict, Optional

import jsonschema
import yaml

from sdpdiff.exceptions import ConfigurationError
from sdpdiff.monitoring.recorder import (
    CloudWatchDiscrepancyRecorder,
    DiscrepancyRecorder,
    InMemoryDiscrepancyRecorder,
)

logger = logging.getLogger(__name__)

SCHEMA_PATH = Path(__file__).resolve().parent / "settings.schema.json"

DEFAULT_SETTINGS: Dict[str, Any] = {
    "metrics_enabled": False,
    "metrics_namespace": CloudWatchDiscrepancyRecorder.NAMESPACE,
    "region_name": "us-east-1",
    "log_level": "INFO",
    "mask_ice_credentials": True,
    "report_dir": "results",
}

# Environment variable -> (setting key, value type)
ENV_OVERRIDES = {
    "SDPDIFF_METRICS_ENABLED": ("metrics_enabled", bool),
    "SDPDIFF_METRICS_NAMESPACE": ("metrics_namespace", str),
    "SDPDIFF_AWS_REGION": ("region_name", str),
    "SDPDIFF_LOG_LEVEL": ("log_level", str),
    "SDPDIFF_MASK_ICE_CREDENTIALS": ("mask_ice_credentials", bool),
    "SDPDIFF_REPORT_DIR": ("report_dir", str),
}

CONFIG_FILE_ENV = "SDPDIFF_CONFIG_FILE"


def _read_env_flag(raw: str) -> bool:
    return raw.strip().lower() == "true"


class Settings:
    """
    Comparator settings.

    Precedence: defaults < YAML settings file < environment variables.
    """

    def __init__(self, values: Optional[Dict[str, Any]] = None):
        """
        Initialize Settings from an already merged mapping.

        Args:
            values: Setting overrides applied on top of the defaults

        Raises:
            ConfigurationError: If the merged settings fail schema validation
        """
        merged = dict(DEFAULT_SETTINGS)
        merged.update(values or {})
        self.validate(merged)

        self.metrics_enabled: bool = merged["metrics_enabled"]
        self.metrics_namespace: str = merged["metrics_namespace"]
        self.region_name: str = merged["region_name"]
        self.log_level: str = merged["log_level"]
        self.mask_ice_credentials: bool = merged["mask_ice_credentials"]
        self.report_dir: str = merged["report_dir"]

    @classmethod
    def load(cls, config_path: Optional[str] = None) -> "Settings":
        """
        Load settings from a YAML file and the environment.

        Args:
            config_path: YAML settings file; falls back to SDPDIFF_CONFIG_FILE.
                No file means defaults plus environment.

        Returns:
            Validated Settings instance

        Raises:
            ConfigurationError: If the file is missing, unparsable or invalid
        """
        values: Dict[str, Any] = {}

        config_path = config_path or os.getenv(CONFIG_FILE_ENV)
        if config_path:
            values.update(cls._load_yaml(config_path))

        for env_name, (key, value_type) in ENV_OVERRIDES.items():
            raw = os.getenv(env_name)
            if raw is None:
                continue
            values[key] = _read_env_flag(raw) if value_type is bool else raw
            logger.debug(f"Setting {key} overridden by {env_name}")

        return cls(values)

    @staticmethod
    def _load_yaml(config_path: str) -> Dict[str, Any]:
        try:
            with open(config_path, "r", encoding="utf-8") as f:
                content = yaml.safe_load(f)
        except FileNotFoundError as e:
            logger.error(f"Settings file not found: {config_path}")
            raise ConfigurationError(f"Settings file not found: {config_path}") from e
        except yaml.YAMLError as e:
            logger.error(f"Invalid YAML in settings file: {e}")
            raise ConfigurationError(f"Invalid YAML in {config_path}: {e}") from e

        if not content:
            logger.warning(f"Empty settings file: {config_path}")
            return {}

        if not isinstance(content, dict):
            raise ConfigurationError(f"Settings file {config_path} must contain a mapping")

        logger.info(f"Loaded settings from {config_path}")
        return content

    @staticmethod
    def load_schema() -> Dict[str, Any]:
        with SCHEMA_PATH.open("r", encoding="utf-8") as f:
            return json.load(f)

    @classmethod
    def validate(cls, values: Dict[str, Any]) -> None:
        """
        Validate a settings mapping against the bundled schema.

        Raises:
            ConfigurationError: If validation fails
        """
        try:
            jsonschema.validate(instance=values, schema=cls.load_schema())
        except jsonschema.ValidationError as e:
            logger.error(f"Settings failed schema validation: {e.message}")
            raise ConfigurationError(f"Settings validation failed: {e.message}") from e
        except jsonschema.SchemaError as e:
            logger.error(f"Settings schema is invalid: {e.message}")
            raise ConfigurationError(f"Settings schema is invalid: {e.message}") from e

    def build_recorder(self, cloudwatch_client=None) -> DiscrepancyRecorder:
        """
        Create the discrepancy recorder these settings ask for.

        Args:
            cloudwatch_client: Optional preconfigured boto3 CloudWatch client

        Returns:
            CloudWatch recorder when metrics are enabled, in-memory recorder otherwise
        """
        if self.metrics_enabled:
            return CloudWatchDiscrepancyRecorder(
                region_name=self.region_name,
                namespace=self.metrics_namespace,
                cloudwatch_client=cloudwatch_client,
            )
        return InMemoryDiscrepancyRecorder()

    def apply_log_level(self, logger_name: str = "sdpdiff") -> None:
        """Set the level of the package logger and of every logger already created under it."""
        logging.getLogger(logger_name).setLevel(self.log_level)
        for name in list(logging.root.manager.loggerDict):
            if name.startswith(logger_name + "."):
                logging.getLogger(name).setLevel(self.log_level)

    def to_dict(self) -> Dict[str, Any]:
        return {key: getattr(self, key) for key in DEFAULT_SETTINGS}
