"""
Generator configuration

Session settings read from a JSON file. Command line options override them.
"""

import json
from dataclasses import dataclass, fields
from typing import Optional

from .errors import ConfigError
from .modules import PLUGIN_PROJECT


@dataclass
class GeneratorConfig:
    """Settings of one generation session"""
    output_dir: str = 'Script/Generated'
    project_dir: str = '.'
    host_plugin_type: Optional[str] = PLUGIN_PROJECT
    generated_user_content: str = 'Script/obj/Generated'
    file_extension: str = '.cs'
    policy_path: Optional[str] = None

    def update(self, **overrides):
        """Apply overrides, ignoring the ones left as None"""
        for key, value in overrides.items():
            if value is not None:
                setattr(self, key, value)


def load_config(path: str) -> GeneratorConfig:
    """Load a GeneratorConfig from a JSON file

    Example:
        {"output_dir": "Plugins/UnrealSharp/Managed/Generated",
         "host_plugin_type": "engine"}
    """
    try:
        with open(path, 'r', encoding='utf-8') as f:
            data = json.load(f)
    except (OSError, ValueError) as exc:
        raise ConfigError(f'Failed to read config {path}: {exc}') from exc

    if not isinstance(data, dict):
        raise ConfigError(f'{path}: config must contain a mapping at the root')

    known = {f.name for f in fields(GeneratorConfig)}
    unknown = set(data) - known
    if unknown:
        raise ConfigError(f"{path}: unknown config keys: {', '.join(sorted(unknown))}")

    for key, value in data.items():
        optional = key in ('host_plugin_type', 'policy_path')
        if value is None and optional:
            continue
        if not isinstance(value, str):
            raise ConfigError(f'{path}: {key} must be a string')

    if 'file_extension' in data and not data['file_extension'].startswith('.'):
        raise ConfigError(f'{path}: file_extension must start with "."')

    return GeneratorConfig(**data)
