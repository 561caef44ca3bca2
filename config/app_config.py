"""
Unified Configuration System for the Barber Admin Dashboard

This module provides a centralized configuration system that consolidates all application settings,
supports environment-based overrides, and provides type-safe configuration access.
"""

from dataclasses import dataclass, field
from typing import Dict, Any, Optional, List
from urllib.parse import urlparse
import os
from pathlib import Path

import streamlit as st


DEFAULT_API_URL = "http://localhost:3000/api"


@dataclass
class APIConfig:
    """Backend API configuration settings"""
    base_url: str = DEFAULT_API_URL
    timeout_seconds: float = 10.0
    max_retries: int = 2
    retry_base_delay: float = 0.5

    @classmethod
    def from_secrets(cls) -> 'APIConfig':
        """Load API config from Streamlit secrets"""
        # In test environment, prefer environment variables
        if os.getenv("PYTEST_CURRENT_TEST") is not None:
            return cls._from_env()

        try:
            return cls(
                base_url=st.secrets.get("BARBER_API_URL", DEFAULT_API_URL),
                timeout_seconds=float(st.secrets.get("BARBER_API_TIMEOUT", 10.0)),
            )
        except Exception:
            # Fallback to environment variables if secrets not available
            return cls._from_env()

    @classmethod
    def _from_env(cls) -> 'APIConfig':
        return cls(
            base_url=os.getenv("BARBER_API_URL", DEFAULT_API_URL),
            timeout_seconds=float(os.getenv("BARBER_API_TIMEOUT", "10.0")),
        )


@dataclass
class AuthConfig:
    """Authentication and session persistence configuration"""
    demo_mode_enabled: bool = True
    cookie_prefix: str = "barber_admin_"
    remember_me_days: int = field(
        default_factory=lambda: int(os.getenv("BARBER_REMEMBER_ME_DAYS", "30"))
    )
    demo_token_lifetime_minutes: int = 60


@dataclass
class PaginationConfig:
    """List screen pagination defaults"""
    default_limit: int = 10
    page_size_options: List[int] = field(default_factory=lambda: [10, 25, 50, 100])


@dataclass
class UIConfig:
    """User interface configuration"""
    app_title: str = "Barber Admin Dashboard"
    currency: str = "IDR"
    login_redirect_page: str = "Dashboard"


@dataclass
class LoggingConfig:
    """Logging and monitoring configuration"""
    level: str = "INFO"
    format: str = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"
    enable_file_logging: bool = False
    log_file: str = "logs/app.log"


@dataclass
class AppConfig:
    """Main application configuration"""
    api: APIConfig = field(default_factory=APIConfig)
    auth: AuthConfig = field(default_factory=AuthConfig)
    pagination: PaginationConfig = field(default_factory=PaginationConfig)
    ui: UIConfig = field(default_factory=UIConfig)
    logging: LoggingConfig = field(default_factory=LoggingConfig)

    # Environment settings
    environment: str = field(default_factory=lambda: os.getenv("APP_ENV", "development"))
    debug: bool = field(default_factory=lambda: os.getenv("DEBUG", "false").lower() == "true")

    @classmethod
    def load(cls) -> 'AppConfig':
        """Load configuration with environment overrides"""
        config = cls()

        config.api = APIConfig.from_secrets()

        demo_flag = os.getenv("BARBER_DEMO_MODE")
        if demo_flag is not None:
            config.auth.demo_mode_enabled = demo_flag.lower() == "true"

        # Apply environment-specific overrides
        if config.environment == "production":
            config.debug = False
            config.logging.level = "WARNING"
            if demo_flag is None:
                config.auth.demo_mode_enabled = False
        elif config.environment == "development":
            config.debug = True
            config.logging.level = "DEBUG"

        return config

    def validate(self) -> List[str]:
        """Validate configuration and return list of errors"""
        errors = []

        parsed = urlparse(self.api.base_url)
        if parsed.scheme not in ("http", "https") or not parsed.netloc:
            errors.append(f"Invalid API base URL: {self.api.base_url!r}")

        if self.api.timeout_seconds <= 0:
            errors.append("API timeout must be positive")

        if self.api.max_retries < 0:
            errors.append("API max_retries cannot be negative")

        if self.pagination.default_limit < 1:
            errors.append("Pagination default_limit must be at least 1")

        if self.auth.remember_me_days < 1:
            errors.append("Remember-me cookie lifetime must be at least 1 day")

        if self.logging.enable_file_logging:
            log_dir = Path(self.logging.log_file).parent
            if not log_dir.exists():
                log_dir.mkdir(parents=True, exist_ok=True)

        return errors

    def get_client_settings(self) -> Dict[str, Any]:
        """Keyword arguments for building the backend API client"""
        return {
            "base_url": self.api.base_url,
            "timeout": self.api.timeout_seconds,
            "max_retries": self.api.max_retries,
            "retry_base_delay": self.api.retry_base_delay,
        }


# Global configuration instance
_config: Optional[AppConfig] = None


def get_config() -> AppConfig:
    """Get the global configuration instance"""
    global _config
    if _config is None:
        _config = AppConfig.load()

        # Validate configuration
        errors = _config.validate()
        if errors:
            import warnings
            for error in errors:
                warnings.warn(f"Configuration error: {error}")

    return _config


def reload_config() -> AppConfig:
    """Reload configuration (useful for testing)"""
    global _config
    _config = None
    return get_config()
