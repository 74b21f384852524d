"""Profile loading and validation for YAML-based edidrandr profiles."""

from __future__ import annotations

import functools
import json
import logging
import os
from dataclasses import dataclass
from importlib import resources
from pathlib import Path
from typing import Any

import yaml
from jsonschema import ValidationError, validators

from edidrandr.core.errors import ProfileLoadError, ProfileValidationError
from edidrandr.core.model import Profile
from edidrandr.core.specs import split_tokens

LOGGER = logging.getLogger(__name__)


class ProfileYamlLoader(yaml.SafeLoader):
    """Safe YAML loader for profiles.

    Repeated keys are rejected with their position, and YAML 1.1 booleans are
    not resolved so that xrandr words such as ``on``/``off`` stay strings.
    """


ProfileYamlLoader.yaml_implicit_resolvers = {
    first_char: [(tag, regexp) for tag, regexp in resolvers if tag != "tag:yaml.org,2002:bool"]
    for first_char, resolvers in yaml.SafeLoader.yaml_implicit_resolvers.items()
}


def _construct_unique_mapping(loader: ProfileYamlLoader, node: yaml.MappingNode, deep: bool = False) -> dict[str, Any]:
    mapping: dict[str, Any] = {}
    for key_node, value_node in node.value:
        key = loader.construct_object(key_node, deep=deep)
        if key in mapping:
            mark = key_node.start_mark
            raise ProfileValidationError(
                f"Duplicate key '{key}' at line {mark.line + 1}, column {mark.column + 1}"
            )
        mapping[key] = loader.construct_object(value_node, deep=deep)
    return mapping


ProfileYamlLoader.add_constructor(
    yaml.resolver.BaseResolver.DEFAULT_MAPPING_TAG,
    _construct_unique_mapping,
)


@dataclass(frozen=True)
class LoadedProfiles:
    profiles: dict[str, Profile]
    warnings: tuple[str, ...]


@functools.lru_cache(maxsize=1)
def _profile_validator() -> Any:
    schema = json.loads(resources.files("edidrandr.schemas").joinpath("profile.schema.json").read_text(encoding="utf-8"))
    validator_cls = validators.validator_for(schema)
    validator_cls.check_schema(schema)
    return validator_cls(schema)


def profile_dirs() -> tuple[Path, Path]:
    xdg_config = Path(os.environ.get("XDG_CONFIG_HOME", Path.home() / ".config"))
    xdg_data = Path(os.environ.get("XDG_DATA_HOME", Path.home() / ".local/share"))
    return xdg_config / "edidrandr/profiles", xdg_data / "edidrandr/profiles"


def _read_yaml(path: Path) -> dict[str, Any]:
    try:
        content = path.read_text(encoding="utf-8")
    except OSError as exc:
        raise ProfileLoadError(f"Could not read profile file {path}: {exc}") from exc

    try:
        loaded = yaml.load(content, Loader=ProfileYamlLoader)
    except yaml.YAMLError as exc:
        raise ProfileValidationError(f"Invalid YAML in {path}: {exc}") from exc
    except ProfileValidationError as exc:
        raise ProfileValidationError(f"Invalid profile {path}: {exc}") from exc

    if not isinstance(loaded, dict):
        raise ProfileValidationError(f"Profile file {path} must contain a mapping at root")
    return loaded


def _normalize_bool(value: Any, *, context: str) -> bool:
    if isinstance(value, bool):
        return value
    if isinstance(value, str):
        lowered = value.strip().lower()
        if lowered == "true":
            return True
        if lowered == "false":
            return False
    raise ProfileValidationError(f"{context} must be boolean true/false")


def _build_profile(doc: dict[str, Any], source: Path) -> Profile:
    validator = _profile_validator()
    try:
        validator.validate(doc)
    except ValidationError as exc:
        path = ".".join(str(p) for p in exc.path)
        where = f" ({path})" if path else ""
        raise ProfileValidationError(f"Schema validation failed for {source}{where}: {exc.message}") from exc

    specs: dict[str, tuple[str, ...]] = {}
    for index, entry in enumerate(doc["outputs"]):
        serial = str(entry["serial"]).strip()
        tokens = split_tokens(entry["config"])
        if not serial:
            raise ProfileValidationError(f"{doc['name']}.outputs.{index}.serial must not be empty")
        if serial in specs:
            LOGGER.warning("Profile '%s' repeats serial '%s'; keeping the first config", doc["name"], serial)
            continue
        specs[serial] = tokens

    all_or_abort = None
    if "all_or_abort" in doc:
        all_or_abort = _normalize_bool(doc["all_or_abort"], context=f"{doc['name']}.all_or_abort")

    return Profile(
        name=doc["name"],
        specs=specs,
        default_tokens=split_tokens(doc["default_config"]) if "default_config" in doc else None,
        prefix=split_tokens(doc["prefix"]) if "prefix" in doc else None,
        all_or_abort=all_or_abort,
    )


def _iter_profile_paths() -> list[Path]:
    paths: list[Path] = []
    # Data directory first so that config entries override it.
    for directory in reversed(profile_dirs()):
        if not directory.exists() or not directory.is_dir():
            continue
        paths.extend(sorted(p for p in directory.iterdir() if p.suffix in {".yml", ".yaml"}))
    return paths


def load_profiles() -> LoadedProfiles:
    profiles: dict[str, Profile] = {}
    warnings: list[str] = []

    for path in _iter_profile_paths():
        doc = _read_yaml(path)
        profile = _build_profile(doc, path)
        if profile.name in profiles:
            warning = f"Profile '{profile.name}' from {path} overrides an earlier definition"
            LOGGER.warning(warning)
            warnings.append(warning)
        profiles[profile.name] = profile

    return LoadedProfiles(profiles=profiles, warnings=tuple(warnings))


def require_profile(loaded: LoadedProfiles, name: str) -> Profile:
    profile = loaded.profiles.get(name)
    if profile is None:
        available = ", ".join(sorted(loaded.profiles)) or "none"
        raise ProfileLoadError(f"Unknown profile '{name}'. Available: {available}")
    return profile
