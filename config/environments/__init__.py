"""
Environment-specific configurations for the dashboard
"""

import os
from config.app_config import AppConfig


def get_environment_config() -> AppConfig:
    """
    Get configuration based on the current environment

    Environment is determined by the APP_ENV environment variable:
    - 'development' -> DevelopmentConfig (demo login allowed)
    - 'production' -> ProductionConfig (demo login disabled)
    - anything else -> AppConfig.load() with env/secrets overrides
    """

    env = os.getenv("APP_ENV", "development").lower()

    if env == "development":
        from .development import get_development_config
        return get_development_config()
    if env == "production":
        from .production import get_production_config
        return get_production_config()
    return AppConfig.load()
