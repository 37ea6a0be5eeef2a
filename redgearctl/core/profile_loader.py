"""Device profile loading and validation for YAML-based redgearctl profiles."""

from __future__ import annotations

import json
import logging
import os
import re
from dataclasses import dataclass
from functools import lru_cache
from importlib import resources
from importlib.resources.abc import Traversable
from pathlib import Path
from typing import Any

import yaml
from jsonschema import ValidationError, validators

from redgearctl.core.errors import ProfileLoadError, ProfileValidationError
from redgearctl.core.model import (
    BYTE_SETTINGS,
    ENUM_SETTINGS,
    DeviceProfile,
    FieldSetting,
    FrameSequence,
    FrameSetting,
    MatchRules,
    Setting,
    SettingValue,
    TransportSpec,
    WriteErrorPolicy,
)
from redgearctl.core.patch import locate

_HEX_RE = re.compile(r"^[0-9a-f]+$")
LOGGER = logging.getLogger(__name__)


class UniqueKeyLoader(yaml.SafeLoader):
    """YAML loader that rejects duplicate mapping keys."""


UniqueKeyLoader.yaml_implicit_resolvers = {
    key: list(value) for key, value in yaml.SafeLoader.yaml_implicit_resolvers.items()
}

# Value names such as "off" must stay strings.
for first_char, mappings in list(UniqueKeyLoader.yaml_implicit_resolvers.items()):
    UniqueKeyLoader.yaml_implicit_resolvers[first_char] = [
        (tag, regexp)
        for tag, regexp in mappings
        if tag != "tag:yaml.org,2002:bool"
    ]


def _construct_mapping(loader: UniqueKeyLoader, node: yaml.Node, deep: bool = False) -> dict[str, Any]:
    mapping: dict[str, Any] = {}
    for key_node, value_node in node.value:
        key = loader.construct_object(key_node, deep=deep)
        if key in mapping:
            raise ProfileValidationError(f"Duplicate key '{key}' in YAML document")
        mapping[key] = loader.construct_object(value_node, deep=deep)
    return mapping


UniqueKeyLoader.add_constructor(
    yaml.resolver.BaseResolver.DEFAULT_MAPPING_TAG,
    _construct_mapping,
)


@dataclass(frozen=True)
class LoadedProfiles:
    profiles: dict[str, DeviceProfile]
    warnings: tuple[str, ...]


@lru_cache(maxsize=1)
def _load_schema_validator() -> Any:
    schema_text = resources.files("redgearctl.schemas").joinpath("profile.schema.json").read_text(
        encoding="utf-8"
    )
    schema = json.loads(schema_text)
    validator_cls = validators.validator_for(schema)
    validator_cls.check_schema(schema)
    return validator_cls(schema)


def _profile_dirs() -> tuple[Path, Path]:
    xdg_config = Path(os.environ.get("XDG_CONFIG_HOME", Path.home() / ".config"))
    xdg_data = Path(os.environ.get("XDG_DATA_HOME", Path.home() / ".local/share"))
    return xdg_config / "redgearctl/profiles", xdg_data / "redgearctl/profiles"


def _read_yaml(path: Path | Traversable) -> dict[str, Any]:
    try:
        content = path.read_text(encoding="utf-8")
    except OSError as exc:
        raise ProfileLoadError(f"Could not read profile file {path}: {exc}") from exc

    try:
        loaded = yaml.load(content, Loader=UniqueKeyLoader)
    except yaml.YAMLError as exc:
        raise ProfileValidationError(f"Invalid YAML in {path}: {exc}") from exc

    if not isinstance(loaded, dict):
        raise ProfileValidationError(f"Profile file {path} must contain a mapping at root")
    return loaded


def _normalize_hex(value: str, *, context: str, length: int | None = None) -> bytes:
    normalized = value.strip().lower().replace(" ", "")
    if len(normalized) == 0:
        raise ProfileValidationError(f"{context} must not be empty")
    if len(normalized) % 2 != 0:
        raise ProfileValidationError(f"{context} must have even-length hex")
    if not _HEX_RE.match(normalized):
        raise ProfileValidationError(f"{context} must contain only [0-9a-f]")
    payload = bytes.fromhex(normalized)
    if length is not None and len(payload) != length:
        raise ProfileValidationError(f"{context} is {len(payload)} bytes, frames are {length} bytes")
    return payload


def _locate_once(template: FrameSequence, placeholder: bytes, *, context: str) -> int:
    indices = locate(template, placeholder)
    if len(indices) != 1:
        raise ProfileValidationError(
            f"{context} placeholder {placeholder.hex()} must occur exactly once in the template, "
            f"found {len(indices)}"
        )
    return indices[0]


def _build_field(
    doc: dict[str, Any], template: FrameSequence, frame_length: int, *, context: str
) -> FieldSetting:
    placeholder = _normalize_hex(doc["placeholder"], context=f"{context}.placeholder", length=frame_length)
    offset = int(doc["offset"])
    if offset >= frame_length:
        raise ProfileValidationError(f"{context}.offset {offset} is outside a {frame_length}-byte frame")
    return FieldSetting(
        frame_index=_locate_once(template, placeholder, context=context),
        offset=offset,
        baseline=placeholder[offset],
    )


def _build_frame_setting(
    setting: Setting,
    doc: dict[str, Any],
    template: FrameSequence,
    frame_length: int,
    *,
    context: str,
) -> FrameSetting:
    placeholders = tuple(
        _normalize_hex(p, context=f"{context}.placeholders[{i}]", length=frame_length)
        for i, p in enumerate(doc["placeholders"])
    )
    frame_indices = tuple(_locate_once(template, p, context=context) for p in placeholders)

    values: dict[str, tuple[bytes, ...]] = {}
    for value_name, hex_frames in doc["values"].items():
        value_context = f"{context}.values.{value_name}"
        if len(hex_frames) != len(placeholders):
            raise ProfileValidationError(
                f"{value_context} has {len(hex_frames)} frames, expected {len(placeholders)}"
            )
        values[str(value_name)] = tuple(
            _normalize_hex(h, context=f"{value_context}[{i}]", length=frame_length)
            for i, h in enumerate(hex_frames)
        )

    expected = {member.value for member in ENUM_SETTINGS[setting]}
    missing = sorted(expected - values.keys())
    unknown = sorted(values.keys() - expected)
    if missing or unknown:
        raise ProfileValidationError(
            f"{context} values mismatch: missing [{', '.join(missing)}], unknown [{', '.join(unknown)}]"
        )

    baseline = next((name for name, frames in values.items() if frames == placeholders), None)
    return FrameSetting(
        frame_indices=frame_indices,
        placeholders=placeholders,
        values=values,
        baseline=baseline,
    )


def _build_reset(doc: dict[str, Any], *, context: str) -> dict[Setting, SettingValue]:
    reset: dict[Setting, SettingValue] = {}
    for name, raw in doc.items():
        setting = Setting(name)
        if setting in BYTE_SETTINGS:
            reset[setting] = int(raw)
            continue
        try:
            reset[setting] = ENUM_SETTINGS[setting](str(raw))
        except ValueError as exc:
            raise ProfileValidationError(f"{context}.{name} has unknown value '{raw}'") from exc
    return reset


def _build_profile(doc: dict[str, Any], source: Path | Traversable) -> DeviceProfile:
    validator = _load_schema_validator()
    try:
        validator.validate(doc)
    except ValidationError as exc:
        path = ".".join(str(p) for p in exc.path)
        where = f" ({path})" if path else ""
        raise ProfileValidationError(f"Schema validation failed for {source}{where}: {exc.message}") from exc

    profile_id = doc["id"]
    transport_doc = doc["transport"]
    transport = TransportSpec(
        type=transport_doc["type"],
        frame_length=int(transport_doc.get("frame_length", 8)),
        settle_ms=int(transport_doc.get("settle_ms", 300)),
        on_write_error=WriteErrorPolicy(transport_doc.get("on_write_error", "continue")),
    )
    frame_length = transport.frame_length

    template = tuple(
        _normalize_hex(h, context=f"{profile_id}.template[{i}]", length=frame_length)
        for i, h in enumerate(doc["template"])
    )

    fields = {
        Setting(name): _build_field(spec, template, frame_length, context=f"{profile_id}.fields.{name}")
        for name, spec in doc["fields"].items()
    }
    frames = {
        Setting(name): _build_frame_setting(
            Setting(name), spec, template, frame_length, context=f"{profile_id}.frames.{name}"
        )
        for name, spec in doc["frames"].items()
    }

    match_doc = doc["match"]
    return DeviceProfile(
        id=profile_id,
        name=doc["name"],
        match=MatchRules(
            vendor_id=int(match_doc["vendor_id"], 16),
            product_id=int(match_doc["product_id"], 16),
            name_contains=tuple(match_doc.get("name_contains", [])),
        ),
        transport=transport,
        template=template,
        fields=fields,
        frames=frames,
        repeat_sentinel=int(doc["repeat_sentinel"], 16),
        reset=_build_reset(doc["reset"], context=f"{profile_id}.reset"),
    )


def _iter_packaged_profile_paths() -> list[Traversable]:
    profile_root = resources.files("redgearctl.profiles")
    return [item for item in profile_root.iterdir() if item.name.endswith((".yml", ".yaml"))]


def _iter_user_profile_paths() -> list[Path]:
    paths: list[Path] = []
    for directory in _profile_dirs():
        if not directory.exists() or not directory.is_dir():
            continue
        paths.extend(sorted(p for p in directory.iterdir() if p.suffix in {".yml", ".yaml"}))
    return paths


@lru_cache(maxsize=1)
def _packaged_profiles() -> tuple[DeviceProfile, ...]:
    return tuple(
        _build_profile(_read_yaml(path), path)
        for path in sorted(_iter_packaged_profile_paths(), key=lambda p: p.name)
    )


def load_profiles() -> LoadedProfiles:
    profiles: dict[str, DeviceProfile] = {p.id: p for p in _packaged_profiles()}
    warnings: list[str] = []

    for path in _iter_user_profile_paths():
        doc = _read_yaml(path)
        profile = _build_profile(doc, path)
        if profile.id in profiles:
            warning = f"User profile '{profile.id}' overrides packaged profile"
            LOGGER.warning(warning)
            warnings.append(warning)
        profiles[profile.id] = profile

    return LoadedProfiles(profiles=profiles, warnings=tuple(warnings))
