"""Shared Pydantic models.

Wire names are camelCase (the wizard speaks JSON); Python attributes are snake_case.
"""

from __future__ import annotations

from enum import Enum
from typing import Literal

from pydantic import BaseModel, ConfigDict, Field, model_validator
from pydantic.alias_generators import to_camel

ALL_MODULES: tuple[str, ...] = (
    "blog",
    "portfolio",
    "team",
    "testimonials",
    "faq",
    "pricing",
    "clients",
    "features",
    "contact",
)


class LifecyclePhase(str, Enum):
    UNCONFIGURED = "unconfigured"
    BUILD = "build"
    DEVELOP = "develop"


class _WireModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


# --- Archive import ---------------------------------------------------------


class ArchiveEntry(BaseModel):
    """One item inside an uploaded archive; `path` is untrusted."""

    path: str
    is_directory: bool = False
    uncompressed_size: int = 0


class ImportManifest(_WireModel):
    files: list[str] = Field(default_factory=list)
    file_count: int = 0
    extraction_method: Literal["system", "embedded"] = "embedded"


# --- Configuration ----------------------------------------------------------


class Locale(_WireModel):
    code: str
    iso: str
    name: str


class FeatureFlags(_WireModel):
    multi_langs: bool | None = None
    double_theme: bool | None = None
    onepager: bool | None = None
    pwa: bool | None = None
    two_factor_auth: bool | None = None

    def as_config_keys(self) -> dict[str, bool]:
        """Set flags keyed by their name in the config source."""
        return self.model_dump(by_alias=True, exclude_none=True)


class ConfigPatchRequest(_WireModel):
    pm_mode: LifecyclePhase
    project_type: Literal["website", "app"] | None = None
    admin_enabled: bool | None = None
    locales: list[Locale] | None = None
    default_locale: str | None = None
    modules: list[str] | None = None
    features: FeatureFlags | None = None

    @model_validator(mode="after")
    def _default_locale_is_listed(self) -> ConfigPatchRequest:
        if self.locales and self.default_locale:
            codes = {loc.code for loc in self.locales}
            if self.default_locale not in codes:
                raise ValueError(f"defaultLocale '{self.default_locale}' is not one of locales")
        return self


class SummaryFeatures(_WireModel):
    multi_langs: bool = False
    double_theme: bool = False
    onepager: bool = False
    pwa: bool = False


class ConfigSummary(_WireModel):
    pm_mode: LifecyclePhase = LifecyclePhase.UNCONFIGURED
    project_type: Literal["website", "app"] | None = None
    admin_enabled: bool = False
    locales: list[Locale] = Field(default_factory=list)
    default_locale: str = "en"
    enabled_modules: list[str] = Field(default_factory=list)
    features: SummaryFeatures = Field(default_factory=SummaryFeatures)
    has_brownfield_content: bool = False
    import_folder_files: list[str] = Field(default_factory=list)
    database_exists: bool = False


class WriteResult(_WireModel):
    success: bool
    database_status: Literal["created", "exists", "error", "timeout"] | None = None
    database_message: str | None = None
    backup_path: str | None = None
