"""
Configuration for declarators: defaults that apply to every signature
a Declarator compiles.

Settings come from a YAML file and the environment:

    METHSIG_DEBUG   any non-empty value turns on debug tracing
    METHSIG_CONFIG  path to a YAML mapping with the keys below

    debug: false
    allow_alias: true
    invocant: $self
"""

import os
from dataclasses import dataclass, fields, replace
from pathlib import Path
from typing import Any, Dict, Optional, Union

import yaml


@dataclass(frozen=True)
class Config:
    debug: bool = False
    allow_alias: bool = True
    invocant: str = "$self"

    @classmethod
    def from_mapping(cls, data: Optional[Dict[str, Any]]) -> "Config":
        data = data or {}
        if not isinstance(data, dict):
            raise ValueError(f"methsig config must be a mapping, not {type(data).__name__}")
        known = {f.name for f in fields(cls)}
        unknown = sorted(set(data) - known)
        if unknown:
            raise ValueError(f"unknown methsig config key(s): {', '.join(unknown)}")
        config = cls(**data)
        if not isinstance(config.invocant, str) or not config.invocant.lstrip("$").isidentifier():
            raise ValueError(f"invalid invocant name: {config.invocant!r}")
        return config

    @classmethod
    def from_env(cls, environ=None) -> "Config":
        environ = os.environ if environ is None else environ
        path = environ.get("METHSIG_CONFIG")
        config = load_config(path) if path else cls()
        if environ.get("METHSIG_DEBUG"):
            config = replace(config, debug=True)
        return config


def load_config(path: Union[str, Path]) -> Config:
    """Loads a Config from a YAML file."""
    text = Path(path).read_text(encoding="utf-8")
    return Config.from_mapping(yaml.safe_load(text))
