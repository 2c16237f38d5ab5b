"""
Configuration Management
Loads settings from YAML files and environment variables
"""
import yaml
import os
from pathlib import Path
from typing import Any, Dict, List, Optional
from pydantic import BaseModel, Field
from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    """Application settings loaded from environment"""

    environment: str = "development"
    debug: bool = True

    # API Settings
    api_prefix: str = "/api/v1"
    cors_origins: list[str] = ["http://localhost:3000"]

    # Storage
    storage_backend: str = "supabase"  # supabase, memory
    supabase_url: Optional[str] = None
    supabase_service_key: Optional[str] = None

    # Redis/Cache
    redis_url: Optional[str] = None

    class Config:
        env_file = ".env"
        env_file_encoding = "utf-8"
        extra = "ignore"


class AssignmentConfig(BaseModel):
    """
    Lead assignment and balancing settings.

    Loaded from the `assignment` section of the YAML config.
    """
    eligible_roles: List[str] = Field(default=["employee", "manager"])
    active_status: str = "active"
    manager_role: str = "manager"

    # Statuses counted towards a telecaller's workload
    open_statuses: List[str] = Field(default=["new", "follow-up", "interested"])
    # Statuses the balancer is allowed to move between telecallers
    movable_statuses: List[str] = Field(default=["new", "follow-up"])

    default_algorithm: str = "roundRobin"
    balance_margin: int = Field(default=2, ge=0)
    iterate_to_fixed_point: bool = False
    max_balance_passes: int = Field(default=5, ge=1)

    # Reject manual reassignment to telecallers outside the eligible roster
    strict_reassignment: bool = False

    # 0 disables the workload stats cache
    stats_cache_ttl_seconds: int = Field(default=0, ge=0)


class ConfigManager:
    """Manages loading and merging configuration from multiple sources"""

    def __init__(self, env: Optional[str] = None, config_dir: Optional[Path] = None):
        self.env = env or os.getenv("ENVIRONMENT", "development")
        self.config_dir = config_dir or Path(__file__).parent.parent.parent / "config"
        self._config: Dict[str, Any] = {}
        self._load_config()

    def _load_config(self) -> None:
        """Load configuration files in order of precedence"""
        # Load default config if exists
        default_path = self.config_dir / "default.yaml"
        if default_path.exists():
            self._config = self._load_yaml(default_path)

        # Load environment-specific config
        env_path = self.config_dir / f"{self.env}.yaml"
        if env_path.exists():
            env_config = self._load_yaml(env_path)
            self._deep_merge(self._config, env_config)

        # Substitute environment variables
        self._substitute_env_vars(self._config)

    def _load_yaml(self, path: Path) -> Dict:
        """Load YAML file"""
        with open(path, 'r') as f:
            return yaml.safe_load(f) or {}

    def _substitute_env_vars(self, config: Dict) -> None:
        """Replace ${VAR_NAME} with environment variable values"""
        for key, value in config.items():
            if isinstance(value, dict):
                self._substitute_env_vars(value)
            elif isinstance(value, str) and value.startswith("${") and value.endswith("}"):
                env_var = value[2:-1]
                config[key] = os.getenv(env_var, value)

    def _deep_merge(self, base: Dict, override: Dict) -> None:
        """Recursively merge override into base"""
        for key, value in override.items():
            if key in base and isinstance(base[key], dict) and isinstance(value, dict):
                self._deep_merge(base[key], value)
            else:
                base[key] = value

    def get(self, key_path: str, default: Any = None) -> Any:
        """
        Get configuration value using dot notation
        Example: config.get("assignment.balance_margin") -> 2
        """
        keys = key_path.split('.')
        value = self._config

        for key in keys:
            if isinstance(value, dict) and key in value:
                value = value[key]
            else:
                return default

        return value

    def get_assignment_config(self) -> AssignmentConfig:
        """Build the typed assignment settings, falling back to defaults"""
        return AssignmentConfig(**(self.get("assignment", {}) or {}))
