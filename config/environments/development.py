"""
Development environment configuration overrides
"""

from dataclasses import dataclass
from config.app_config import AppConfig


@dataclass
class DevelopmentConfig(AppConfig):
    """Development environment configuration"""

    def __post_init__(self):

        # Development-specific overrides
        self.environment = "development"
        self.debug = True

        # More verbose logging in development
        self.logging.level = "DEBUG"
        self.logging.enable_file_logging = True
        self.logging.log_file = "logs/dev-app.log"

        self.ui.app_title = "💈 Barber Admin (DEV)"

        # Demo accounts are available when the local backend is not running
        self.auth.demo_mode_enabled = True

        # Fail fast against a local backend
        self.api.timeout_seconds = 5.0
        self.api.max_retries = 1


def get_development_config() -> DevelopmentConfig:
    """Get development-specific configuration"""
    return DevelopmentConfig()
