"""Schema validation for config patch requests."""

from __future__ import annotations

import json
from functools import lru_cache
from importlib import resources
from typing import Any

from jsonschema import Draft202012Validator
from jsonschema.exceptions import best_match
from pydantic import ValidationError

from site_bootstrap.errors import InvalidConfiguration
from site_bootstrap.types import ConfigPatchRequest

# --- Schema loaders ---------------------------------------------------------


def _load_schema(package: str, resource_name: str) -> dict:
    with resources.files(package).joinpath(resource_name).open("r", encoding="utf-8") as f:
        return json.load(f)


@lru_cache(maxsize=1)
def _patch_validator() -> Draft202012Validator:
    return Draft202012Validator(_load_schema("site_bootstrap.schema", "config_patch.schema.json"))


# --- Public validators ------------------------------------------------------


def validate_patch_request(data: Any) -> ConfigPatchRequest:
    """Check *data* against the patch schema and return the typed request.

    Raises InvalidConfiguration on the first violation; nothing is touched on disk.
    """
    if not isinstance(data, dict):
        raise InvalidConfiguration("Configuration must be a JSON object")

    error = best_match(_patch_validator().iter_errors(data))
    if error is not None:
        where = "/".join(str(p) for p in error.absolute_path) or "request"
        raise InvalidConfiguration(f"{where}: {error.message}")

    try:
        return ConfigPatchRequest.model_validate(data)
    except ValidationError as exc:
        first = exc.errors()[0]
        raise InvalidConfiguration(first.get("msg", "Invalid configuration")) from None
