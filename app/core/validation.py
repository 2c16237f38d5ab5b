"""
Configuration Validation Module
Validates storage and cache configuration on startup
"""
import os
import logging
from typing import Dict, List, Optional, Tuple
from dataclasses import dataclass

logger = logging.getLogger(__name__)


@dataclass
class ValidationResult:
    """Result of a configuration validation check."""
    component: str
    setting: str
    is_valid: bool
    message: str


class ConfigValidator:
    """
    Validates service configuration at startup.

    Ensures the selected storage backend has its credentials before the
    application starts accepting requests. Redis is always optional.
    """

    KNOWN_BACKENDS = ("supabase", "memory")

    # Required environment variables by storage backend
    BACKEND_ENV_VARS: Dict[str, List[Tuple[str, str]]] = {
        "supabase": [
            ("SUPABASE_URL", "Supabase database"),
            ("SUPABASE_SERVICE_KEY", "Supabase database"),
        ],
        "memory": [],
    }

    OPTIONAL_ENV_VARS = [("REDIS_URL", "Redis stats cache")]

    def __init__(self, strict: bool = False):
        """
        Initialize validator.

        Args:
            strict: If True, treat warnings as errors
        """
        self.strict = strict
        self.results: List[ValidationResult] = []

    def validate_all(self) -> Tuple[bool, List[ValidationResult]]:
        """
        Validate all configuration.

        Returns:
            Tuple of (all_valid, list of results)
        """
        self.results = []

        backend = os.getenv("STORAGE_BACKEND", "supabase")
        if backend not in self.KNOWN_BACKENDS:
            self._add_error("storage", "STORAGE_BACKEND",
                f"Unknown storage backend '{backend}' (expected one of {', '.join(self.KNOWN_BACKENDS)})")
        else:
            if backend == "memory":
                self._add_warning("storage", "STORAGE_BACKEND",
                    "In-memory lead store selected; data is lost on restart")

            for env_var, description in self.BACKEND_ENV_VARS[backend]:
                if not os.getenv(env_var):
                    self._add_error("storage", env_var,
                        f"{description} requires {env_var} to be set")
                else:
                    self._add_success("storage", env_var, f"{description} configured")

        for env_var, description in self.OPTIONAL_ENV_VARS:
            if not os.getenv(env_var):
                self._add_warning("cache", env_var,
                    f"{description} not configured (in-memory fallback will be used)")
            else:
                self._add_success("cache", env_var, f"{description} configured")

        errors = [r for r in self.results if not r.is_valid]
        return len(errors) == 0, self.results

    def _add_success(self, component: str, setting: str, message: str):
        self.results.append(ValidationResult(
            component=component,
            setting=setting,
            is_valid=True,
            message=message
        ))

    def _add_error(self, component: str, setting: str, message: str):
        self.results.append(ValidationResult(
            component=component,
            setting=setting,
            is_valid=False,
            message=message
        ))

    def _add_warning(self, component: str, setting: str, message: str):
        self.results.append(ValidationResult(
            component=component,
            setting=setting,
            is_valid=not self.strict,  # Warnings become errors in strict mode
            message=f"WARNING: {message}"
        ))

    def log_results(self):
        """Log all validation results."""
        errors = [r for r in self.results if not r.is_valid]
        warnings = [r for r in self.results if r.is_valid and "WARNING" in r.message]
        successes = [r for r in self.results if r.is_valid and "WARNING" not in r.message]

        if successes:
            logger.info("Configuration validated:")
            for r in successes:
                logger.info(f"  ✓ [{r.component}] {r.message}")

        for r in warnings:
            logger.warning(f"  ⚠ [{r.component}] {r.message}")

        if errors:
            logger.error("Configuration errors:")
            for r in errors:
                logger.error(f"  ✗ [{r.component}] {r.message}")

    def get_error_summary(self) -> Optional[str]:
        """Get summary of errors for exception message."""
        errors = [r for r in self.results if not r.is_valid]
        if not errors:
            return None

        lines = ["Configuration errors:"]
        for r in errors:
            lines.append(f"  - {r.setting}: {r.message}")
        return "\n".join(lines)


def validate_config_on_startup(strict: bool = False) -> None:
    """
    Validate configuration at startup.

    Args:
        strict: If True, fail on warnings too

    Raises:
        RuntimeError: If required configuration is missing
    """
    validator = ConfigValidator(strict=strict)
    all_valid, _ = validator.validate_all()
    validator.log_results()

    if not all_valid:
        raise RuntimeError(validator.get_error_summary())

    logger.info("Configuration validated successfully")
