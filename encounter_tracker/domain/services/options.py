"""Per-deployment data-service policy.

Defaults are permissive (no authorization, no tenant isolation, hard delete);
production deployments tighten them through DATA_SERVICE_* environment
variables or by passing an explicit instance to create_service_registry().
"""

from __future__ import annotations

from pydantic import Field, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class DataServiceOptions(BaseSettings):
    model_config = SettingsConfigDict(env_prefix="DATA_SERVICE_", env_file=".env", extra="ignore")

    enable_authorization: bool = False
    enable_tenant_isolation: bool = False
    use_soft_delete: bool = False
    # Soft-deleted records stay readable through get_by_id (hidden from listings).
    soft_deleted_visible_by_id: bool = True
    cache_expiration_minutes: int = Field(default=30, gt=0)
    cache_sliding_expiration_minutes: int = Field(default=5, gt=0)
    # MemoryCache capacity; least recently used entries are evicted past it.
    cache_max_entries: int = Field(default=10000, gt=0)
    default_page_size: int = Field(default=20, gt=0)
    max_page_size: int = Field(default=100, gt=0)
    max_search_results: int = Field(default=1000, gt=0)

    @model_validator(mode="after")
    def _check_bounds(self) -> DataServiceOptions:
        if self.cache_sliding_expiration_minutes > self.cache_expiration_minutes:
            raise ValueError("sliding cache expiration cannot exceed the absolute expiration")
        if self.default_page_size > self.max_page_size:
            raise ValueError("default_page_size cannot exceed max_page_size")
        return self

    @property
    def tenant_isolation_active(self) -> bool:
        """Tenant isolation only applies while authorization is enforced."""
        return self.enable_authorization and self.enable_tenant_isolation
