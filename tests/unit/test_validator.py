from __future__ import annotations

import pytest

from site_bootstrap.errors import InvalidConfiguration
from site_bootstrap.types import LifecyclePhase
from site_bootstrap.validator import validate_patch_request

EN = {"code": "en", "iso": "en-US", "name": "English"}
RU = {"code": "ru", "iso": "ru-RU", "name": "Russian"}


def test_minimal_request() -> None:
    request = validate_patch_request({"pmMode": "build"})
    assert request.pm_mode is LifecyclePhase.BUILD
    assert request.locales is None
    assert request.modules is None


def test_full_request() -> None:
    request = validate_patch_request(
        {
            "pmMode": "develop",
            "projectType": "website",
            "adminEnabled": True,
            "locales": [EN, RU],
            "defaultLocale": "ru",
            "modules": ["blog", "contact"],
            "features": {"pwa": True, "twoFactorAuth": False},
        }
    )
    assert request.default_locale == "ru"
    assert request.features.as_config_keys() == {"pwa": True, "twoFactorAuth": False}


@pytest.mark.parametrize(
    "body",
    [
        {},
        {"pmMode": "production"},
        {"pmMode": "build", "projectType": "mobile"},
        {"pmMode": "build", "modules": ["shop"]},
        {"pmMode": "build", "modules": ["blog", "blog"]},
        {"pmMode": "build", "locales": []},
        {"pmMode": "build", "locales": [{"code": "en", "iso": "en-US", "name": "x'); evil('"}]},
        {"pmMode": "build", "features": {"darkMagic": True}},
        {"pmMode": "build", "adminEnabled": "yes"},
        {"pmMode": "build", "extra": 1},
    ],
)
def test_schema_rejections(body) -> None:
    with pytest.raises(InvalidConfiguration) as exc:
        validate_patch_request(body)
    assert exc.value.code == "CFG_001"


def test_default_locale_must_be_listed() -> None:
    with pytest.raises(InvalidConfiguration) as exc:
        validate_patch_request({"pmMode": "build", "locales": [EN], "defaultLocale": "ru"})
    assert "defaultLocale" in exc.value.message


def test_non_object_rejected() -> None:
    with pytest.raises(InvalidConfiguration):
        validate_patch_request(["pmMode", "build"])


def test_error_payload_has_no_internals() -> None:
    with pytest.raises(InvalidConfiguration) as exc:
        validate_patch_request({"pmMode": "build", "projectType": "mobile"})
    payload = exc.value.to_dict()
    assert set(payload) == {"code", "message"}
    assert payload["code"] == "CFG_001"
    assert payload["message"].startswith("projectType:")
