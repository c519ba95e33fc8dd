"""Configuration loading and validation for YAML-based inputactions configs."""

from __future__ import annotations

import json
import logging
import os
import shlex
from importlib import resources
from pathlib import Path
from typing import Any

import yaml
from jsonschema import validators

from inputactions.core.errors import ConfigError, ConfigLoadError
from inputactions.core.keys import parse_key_name
from inputactions.core.model import ActionSpec, Config, Rule, TriggerState

CONFIG_ENV_KEY = "INPUTACTION_CONFIG"
LOGGER = logging.getLogger(__name__)


class UniqueKeyLoader(yaml.SafeLoader):
    """YAML loader that rejects duplicate mapping keys."""


# "on", "yes", "off" etc. must stay strings: `on:` is a rule field.
UniqueKeyLoader.yaml_implicit_resolvers = {
    key: list(value) for key, value in yaml.SafeLoader.yaml_implicit_resolvers.items()
}

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
            raise ConfigError(f"Duplicate key '{key}' in YAML document")
        mapping[key] = loader.construct_object(value_node, deep=deep)
    return mapping


UniqueKeyLoader.add_constructor(
    yaml.resolver.BaseResolver.DEFAULT_MAPPING_TAG,
    _construct_mapping,
)


def _load_schema_validator() -> Any:
    schema_text = resources.files("inputactions.schemas").joinpath("config.schema.json").read_text(
        encoding="utf-8"
    )
    schema = json.loads(schema_text)
    validator_cls = validators.validator_for(schema)
    validator_cls.check_schema(schema)
    return validator_cls(schema)


def _config_path() -> Path:
    xdg_config = Path(os.environ.get("XDG_CONFIG_HOME", Path.home() / ".config"))
    return xdg_config / "inputactions/config.yaml"


def _read_yaml(text: str, source: str) -> dict[str, Any]:
    try:
        loaded = yaml.load(text, Loader=UniqueKeyLoader)
    except yaml.YAMLError as exc:
        raise ConfigError(f"Invalid YAML in {source}: {exc}") from exc

    if not isinstance(loaded, dict):
        raise ConfigError(f"Configuration {source} must contain a mapping at root")
    return loaded


def parse_action(command: str) -> ActionSpec:
    """Split a shell-style command string into program and arguments."""
    try:
        argv = tuple(shlex.split(command))
    except ValueError as exc:
        raise ConfigError(f"invalid command '{command}': {exc}") from exc
    if not argv:
        raise ConfigError("action must not be empty")
    if any("\0" in token for token in argv):
        raise ConfigError(f"invalid command {command!r}: contains a NUL byte")
    return ActionSpec(argv=argv, command=command)


def _build_rule(doc: dict[str, Any]) -> Rule:
    return Rule(
        key=parse_key_name(doc["key"]),
        on=TriggerState.from_name(doc.get("on", TriggerState.PRESS.value)),
        action=parse_action(doc["action"]),
    )


def parse_config(text: str, source: str = "<config>") -> Config:
    """Build a fully valid Config, or raise one ConfigError listing every problem."""
    doc = _read_yaml(text, source)

    problems: list[str] = []
    for error in sorted(_load_schema_validator().iter_errors(doc), key=lambda e: [str(p) for p in e.path]):
        path = ".".join(str(p) for p in error.path)
        where = f"{path}: " if path else ""
        problems.append(f"{where}{error.message}")
    if problems:
        raise ConfigError(_describe(source, problems))

    rules: list[Rule] = []
    for index, action_doc in enumerate(doc.get("actions", [])):
        try:
            rules.append(_build_rule(action_doc))
        except ConfigError as exc:
            problems.append(f"actions.{index}: {exc}")
    if problems:
        raise ConfigError(_describe(source, problems))

    return Config(name=doc["name"], rules=tuple(rules))


def _describe(source: str, problems: list[str]) -> str:
    lines = "\n".join(f"  - {problem}" for problem in problems)
    return f"Invalid configuration in {source}:\n{lines}"


def read_config_text(path: Path | None = None) -> tuple[str, str]:
    """Return ``(text, source)`` from the first available configuration source.

    Sources are tried in order: an explicit file path, the
    ``INPUTACTION_CONFIG`` environment variable holding the document itself,
    then ``$XDG_CONFIG_HOME/inputactions/config.yaml``.
    """
    if path is None:
        env_text = os.environ.get(CONFIG_ENV_KEY)
        if env_text is not None:
            return env_text, f"${CONFIG_ENV_KEY}"
        path = _config_path()
        if not path.exists():
            raise ConfigLoadError(f"{CONFIG_ENV_KEY} not set and no config file at {path}")

    try:
        return path.read_text(encoding="utf-8"), str(path)
    except OSError as exc:
        raise ConfigLoadError(f"Could not read config file {path}: {exc}") from exc


def load_config(path: Path | None = None) -> Config:
    text, source = read_config_text(path)
    config = parse_config(text, source)
    LOGGER.debug("Loaded %d rule(s) for device '%s' from %s", len(config.rules), config.name, source)
    return config
