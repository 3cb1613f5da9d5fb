# config.py

import os
import importlib
import logging
from typing import Any, Callable, Optional
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

import yaml
from pydantic import BaseModel, ConfigDict, field_validator

logger = logging.getLogger(__name__)

DEBUG_MODE = os.getenv("DEBUG", "false").lower() == "true"

DEFAULT_TIMEZONE = "Europe/Minsk"
DEFAULT_BRANCH = "master"
DEFAULT_REMOTE = "origin"
# %:z is rendered as +HH:MM, see utils.format_timestamp
DEFAULT_DATE_FORMAT = "%Y-%m-%d %H:%M:%S%:z"
DEFAULT_COMMAND_TIMEOUT = 300

AVAILABLE_OPTIONS = (
    "directory",
    "branch",
    "remote",
    "email",
    "timezone",
    "date_format",
    "command_timeout",
    "post_deploy",
    "server_name",
)


def load_config(path: Optional[str] = None) -> dict:
    """
    Load configuration from the YAML file specified by CONFIG_PATH environment variable or the default path.

    Returns:
        dict: Parsed configuration dictionary.
    """
    config_path = path or os.getenv("CONFIG_PATH", "config.yaml")

    if not os.path.exists(config_path):
        logger.error(f"Configuration file '{config_path}' not found.")
        raise FileNotFoundError(f"Configuration file '{config_path}' not found.")

    try:
        with open(config_path, 'r') as f:
            config = yaml.safe_load(f) or {}
            logger.info(f"Configuration loaded successfully from '{config_path}'.")
            return config
    except yaml.YAMLError as e:
        logger.error(f"Error parsing YAML file '{config_path}': {e}")
        raise


def resolve_hook(target: str) -> Callable[[str], Any]:
    """Import a post-deploy hook given as 'package.module:attribute'."""
    module_name, _, attribute = target.partition(":")
    if not module_name or not attribute:
        raise ValueError(f"Post-deploy hook '{target}' must look like 'package.module:function'")

    module = importlib.import_module(module_name)
    hook = getattr(module, attribute, None)
    if not callable(hook):
        raise ValueError(f"Post-deploy hook '{target}' is not callable")
    return hook


class DeployConfig(BaseModel):
    """Settings of the deployment receiver, built once at startup."""

    model_config = ConfigDict(frozen=True)

    directory: str
    branch: str = DEFAULT_BRANCH
    remote: str = DEFAULT_REMOTE
    email: str = ""
    timezone: str = DEFAULT_TIMEZONE
    date_format: str = DEFAULT_DATE_FORMAT
    command_timeout: float = DEFAULT_COMMAND_TIMEOUT
    post_deploy: Optional[Callable[[str], Any]] = None
    server_name: str = ""

    @field_validator("directory")
    @classmethod
    def directory_must_exist(cls, value: str) -> str:
        path = os.path.realpath(os.path.expanduser(value))
        if not os.path.isdir(path):
            raise ValueError(f"Working directory '{value}' does not exist")
        return path

    @field_validator("timezone")
    @classmethod
    def timezone_must_be_known(cls, value: str) -> str:
        try:
            ZoneInfo(value)
        except (ZoneInfoNotFoundError, ValueError):
            raise ValueError(f"Unknown timezone '{value}'")
        return value

    @field_validator("command_timeout")
    @classmethod
    def timeout_not_negative(cls, value: float) -> float:
        if value < 0:
            raise ValueError("command_timeout must be zero or positive")
        return value

    @property
    def tzinfo(self) -> ZoneInfo:
        return ZoneInfo(self.timezone)

    @property
    def timeout(self) -> Optional[float]:
        return self.command_timeout or None

    @classmethod
    def from_options(cls, options: Optional[dict] = None) -> "DeployConfig":
        """
        Build the configuration from a raw options mapping.

        Unknown keys and empty values are ignored so the defaults apply.
        """
        values = {}
        for option, value in (options or {}).items():
            if option not in AVAILABLE_OPTIONS:
                logger.debug(f"Ignoring unknown option '{option}'.")
                continue
            if value is None or value == "":
                continue
            values[option] = value

        values.setdefault("directory", os.getcwd())

        if isinstance(values.get("post_deploy"), str):
            values["post_deploy"] = resolve_hook(values["post_deploy"])

        return cls(**values)


def build_deploy_config(config: dict) -> DeployConfig:
    deploy_config = DeployConfig.from_options(config.get("deploy", {}))

    # Log summary of key settings (without sensitive details)
    logger.info(f"Working directory: {deploy_config.directory}")
    logger.info(f"Git remote/branch: {deploy_config.remote}/{deploy_config.branch}")
    logger.info(f"Report timezone: {deploy_config.timezone}")
    if not deploy_config.email:
        logger.warning("No report recipient configured. Email reports will not be sent.")
    return deploy_config
