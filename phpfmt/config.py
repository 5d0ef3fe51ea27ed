"""
Formatting options.

Sources, later ones win:
 - built-in defaults
 - the nearest .phpfmt.yml walking up from the formatted file
 - the PHPFMT environment variable (comma separated switches)
 - command-line flags
"""
from __future__ import annotations

import os
import sys
from dataclasses import dataclass, fields, replace
from pathlib import Path
from typing import Any, Dict, Mapping, Optional

import yaml

# ---------- Config ----------
DEBUG = False
CONFIG_FILE = ".phpfmt.yml"
ENV_VAR = "PHPFMT"
DEFAULT_TAB_WIDTH = 4


class ConfigError(Exception):
    pass


@dataclass(frozen=True)
class Options:
    tab_width: int = DEFAULT_TAB_WIDTH
    order_uses: bool = True
    align_columns: bool = True
    convert_tabs: bool = True


OPTION_TYPES = {f.name: f.type for f in fields(Options)}


def _check(key: str, value: Any, source: str) -> Any:
    if key not in OPTION_TYPES:
        raise ConfigError(f"{source}: unknown option {key!r}")
    if OPTION_TYPES[key] in (int, 'int'):
        if isinstance(value, bool) or not isinstance(value, int) or value < 1:
            raise ConfigError(f"{source}: {key} must be a positive integer, got {value!r}")
    elif not isinstance(value, bool):
        raise ConfigError(f"{source}: {key} must be true or false, got {value!r}")
    return value


def options_from_mapping(data: Optional[Mapping[str, Any]], base: Options = Options(),
                         source: str = "options") -> Options:
    if not data:
        return base
    if not isinstance(data, Mapping):
        raise ConfigError(f"{source}: expected a mapping of options")
    values = {k: _check(k, v, source) for k, v in data.items()}
    return replace(base, **values)


def load_config_file(path: Path, base: Options = Options()) -> Options:
    try:
        data = yaml.safe_load(path.read_text(encoding="utf-8"))
    except yaml.YAMLError as e:
        raise ConfigError(f"{path}: {e}") from e
    return options_from_mapping(data, base, str(path))


_config_cache: Dict[Path, Optional[Path]] = {}


def find_config_file(directory: Path) -> Optional[Path]:
    """Nearest .phpfmt.yml in directory or one of its parents."""
    directory = directory.resolve()
    visited = []
    found = None
    for d in [directory, *directory.parents]:
        if d in _config_cache:
            found = _config_cache[d]
            break
        visited.append(d)
        candidate = d / CONFIG_FILE
        if candidate.is_file():
            found = candidate
            break
    for d in visited:
        _config_cache[d] = found
    return found


def options_from_env(env: Optional[Mapping[str, str]] = None, base: Options = Options()) -> Options:
    if env is None:
        env = os.environ
    opts = base
    for item in env.get(ENV_VAR, "").split(","):
        item = item.strip()
        if item in ("", "base"):
            continue
        elif item == "align":
            opts = replace(opts, align_columns=True)
        elif item == "noalign":
            opts = replace(opts, align_columns=False)
        elif item == "uses":
            opts = replace(opts, order_uses=True)
        elif item == "nouses":
            opts = replace(opts, order_uses=False)
        elif item == "tabs":
            opts = replace(opts, convert_tabs=True)
        elif item == "notabs":
            opts = replace(opts, convert_tabs=False)
        elif item.startswith("tabwidth=") and item[len("tabwidth="):].isdigit() \
                and int(item[len("tabwidth="):]) > 0:
            opts = replace(opts, tab_width=int(item[len("tabwidth="):]))
        else:
            print(f"phpfmt: Unknown option {item!r} in {ENV_VAR}", file=sys.stderr)
    return opts


def resolve_options(directory: Optional[Path] = None, env: Optional[Mapping[str, str]] = None,
                    overrides: Optional[Mapping[str, Any]] = None) -> Options:
    opts = Options()
    if directory is not None:
        path = find_config_file(directory)
        if path is not None:
            if DEBUG:
                print(f"DEBUG: using config {path}", file=sys.stderr)
            opts = load_config_file(path, opts)
    opts = options_from_env(env, opts)
    return options_from_mapping(overrides, opts, "command line")
