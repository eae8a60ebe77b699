"""
Configuration for the neo-authz permission core.

Settings are read from the environment (and an optional ``.env`` file) through
pydantic-settings. Authorization settings use the ``AUTHZ_`` prefix and the
Keycloak admin client uses ``KEYCLOAK_``.
"""
from functools import lru_cache
from typing import Optional

from pydantic import Field, SecretStr, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from .constants import CacheBackendType


class KeycloakSettings(BaseSettings):
    """Keycloak admin client used by the role-mapping resolver."""

    model_config = SettingsConfigDict(
        env_prefix="KEYCLOAK_",
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore"
    )

    enabled: bool = Field(default=False, description="Resolve permissions from Keycloak realm roles")
    base_url: str = Field(default="http://localhost:8080", description="Keycloak server URL")
    realm: str = Field(default="neo", description="Realm holding the users")
    admin_client_id: str = Field(default="neo-authz", description="Service account client id")
    admin_client_secret: SecretStr = Field(default=SecretStr(""), description="Service account secret")
    verify_ssl: bool = Field(default=True)
    timeout: int = Field(default=30, description="Request timeout in seconds")

    @model_validator(mode="after")
    def check_required_when_enabled(self) -> "KeycloakSettings":
        if not self.enabled:
            return self
        missing = [
            name for name, value in (
                ("base_url", self.base_url),
                ("realm", self.realm),
                ("admin_client_id", self.admin_client_id),
                ("admin_client_secret", self.admin_client_secret.get_secret_value()),
            )
            if not value or not value.strip()
        ]
        if missing:
            raise ValueError(f"Keycloak is enabled but these settings are empty: {', '.join(missing)}")
        return self


class AuthzSettings(BaseSettings):
    """Permission aggregation, cache and health probe settings."""

    model_config = SettingsConfigDict(
        env_prefix="AUTHZ_",
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore"
    )

    # Cache
    cache_backend: CacheBackendType = Field(default=CacheBackendType.MEMORY)
    redis_url: Optional[str] = Field(default=None, description="Required for the redis backend")
    cache_key_prefix: str = Field(default="neo_authz")
    permission_cache_ttl: int = Field(default=1800, gt=0, description="Seconds a permission set stays cached")
    role_cache_ttl: int = Field(default=900, gt=0, description="Seconds Keycloak roles stay cached")

    # Aggregation
    resolver_concurrency: int = Field(default=8, ge=1)

    # Health probe
    health_check_user_id: str = Field(default="00000000-0000-0000-0000-000000000001")
    health_max_resolution_seconds: float = Field(default=2.0, gt=0)
    health_min_cache_hit_rate: float = Field(default=0.70, ge=0.0, le=1.0)
    health_min_checks_for_hit_rate: int = Field(default=100, ge=0)
    health_max_active_checks: int = Field(default=100, ge=0)
    health_cache_check_user_id: str = Field(default="cache-health-test")
    health_max_cache_seconds: float = Field(default=1.0, gt=0, description="Budget for a miss then hit pair")

    @model_validator(mode="after")
    def check_redis_url(self) -> "AuthzSettings":
        if self.cache_backend == CacheBackendType.REDIS and not self.redis_url:
            raise ValueError("redis_url is required when cache_backend is 'redis'")
        return self


@lru_cache()
def get_settings() -> AuthzSettings:
    """Get cached authorization settings."""
    return AuthzSettings()


@lru_cache()
def get_keycloak_settings() -> KeycloakSettings:
    """Get cached Keycloak settings."""
    return KeycloakSettings()
