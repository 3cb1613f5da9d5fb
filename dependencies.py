# dependencies.py

from functools import lru_cache

from config import DeployConfig, build_deploy_config, load_config
from notifications import Notifications


@lru_cache()
def get_app_config() -> dict:
    return load_config()


@lru_cache()
def get_deploy_config() -> DeployConfig:
    return build_deploy_config(get_app_config())


@lru_cache()
def get_notifier() -> Notifications:
    return Notifications(get_app_config())
