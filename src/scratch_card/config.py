from __future__ import annotations

import copy
import hashlib
import json
import os
from pathlib import Path
from typing import Any, Dict, Mapping, Tuple

import yaml


ENV_PREFIX = "SCRATCH_CARD_"

PATH_KEYS = ("out_report", "out_card", "log_file", "summary_csv")
INT_KEYS = {"rows", "cols", "games", "seed.value"}
# Keys that decide which cards and moves a run produces.
HASHED_KEYS = ("rows", "cols", "games", "strategy", "seed.engine", "seed.value")

DEFAULTS: Dict[str, Any] = {
    "rows": 3,
    "cols": 3,
    "games": 1000,
    "strategy": "random",
    "seed": {"engine": "py_random", "value": None},
    "log_level": "WARNING",
}


def _read_config_file(config_path: Path) -> Dict[str, Any]:
    if not config_path.exists():
        raise FileNotFoundError(f"Config file not found: {config_path}")
    suffix = config_path.suffix.lower()
    text = config_path.read_text(encoding="utf-8")
    if suffix in (".yaml", ".yml"):
        data = yaml.safe_load(text) or {}
    elif suffix == ".json":
        data = json.loads(text)
    else:
        raise ValueError(f"Unsupported config extension: {suffix}")
    if not isinstance(data, dict):
        raise ValueError(f"Top-level config in {config_path.name} must be a mapping")
    return data


def _flatten_file_config(data: Mapping[str, Any]) -> Dict[str, Any]:
    """Turn file sections into dotted keys so they merge key by key.

    A bare `seed: 5` is shorthand for `seed.value`.
    """
    flat: Dict[str, Any] = {}
    for key, value in data.items():
        if key == "seed" and not isinstance(value, Mapping):
            flat["seed.value"] = value
        elif isinstance(value, Mapping):
            for sub_key, sub_value in value.items():
                flat[f"{key}.{sub_key}"] = sub_value
        else:
            flat[key] = value
    return flat


def _collect_env_vars(env: Mapping[str, str]) -> Dict[str, Any]:
    """Map SCRATCH_CARD_* variables to dotted config keys.

    SCRATCH_CARD_SEED_VALUE maps to `seed.value`; unknown names are ignored.
    """
    known = {"rows", "cols", "games", "strategy", "log_level"} | set(PATH_KEYS)
    known |= {"seed.value", "seed.engine"}

    result: Dict[str, Any] = {}
    for env_key, raw in env.items():
        if not env_key.startswith(ENV_PREFIX):
            continue
        name = env_key[len(ENV_PREFIX):].lower()
        if name.startswith("seed_"):
            name = "seed." + name[len("seed_"):]
        if name not in known:
            continue
        if name in INT_KEYS:
            try:
                result[name] = int(raw)
            except ValueError:
                result[name] = raw
        else:
            result[name] = raw
    return result


def _apply_overrides(base: Dict[str, Any], overrides: Mapping[str, Any]) -> Dict[str, Any]:
    merged = copy.deepcopy(base)
    for key, value in overrides.items():
        section, _, leaf = key.partition(".")
        if not leaf:
            merged[key] = value
            continue
        if not isinstance(merged.get(section), dict):
            merged[section] = {}
        merged[section][leaf] = value
    return merged


def _lookup(resolved: Mapping[str, Any], dotted: str) -> Any:
    section, _, leaf = dotted.partition(".")
    value = resolved.get(section)
    if leaf:
        return value.get(leaf) if isinstance(value, Mapping) else None
    return value


def compute_params_hash(resolved: Mapping[str, Any]) -> str:
    contract = {k: _lookup(resolved, k) for k in HASHED_KEYS if _lookup(resolved, k) is not None}
    payload = json.dumps(contract, ensure_ascii=True, sort_keys=True, separators=(",", ":"))
    return "sha256:" + hashlib.sha256(payload.encode("utf-8")).hexdigest()


def resolve_paths(
    resolved: Dict[str, Any],
    config_file: Path | None,
    cli_overrides: Mapping[str, Any],
) -> Dict[str, Any]:
    """Make output paths absolute.

    Paths given on the command line are relative to the CWD, the rest to the
    config file's directory.
    """
    cwd = Path.cwd()
    result = dict(resolved)
    for key in PATH_KEYS:
        value = resolved.get(key)
        if value in (None, ""):
            result[key] = None
            continue
        path = Path(str(value))
        if not path.is_absolute():
            from_cli = key in cli_overrides or config_file is None
            base = cwd if from_cli else config_file.parent
            path = (base / path).resolve()
        result[key] = str(path)
    return result


def resolve_parameters(
    *,
    config_path_str: str | None,
    cli_overrides: Dict[str, Any],
    env: Mapping[str, str] | None = None,
) -> Tuple[Dict[str, Any], str, Path | None]:
    """Resolve parameters with precedence CLI > ENV > config > defaults.

    Returns (resolved_params, params_hash, config_path)
    """
    config_path = Path(config_path_str).resolve() if config_path_str else None
    file_cfg = _flatten_file_config(_read_config_file(config_path)) if config_path else {}
    env_map = _collect_env_vars(os.environ if env is None else env)

    merged = _apply_overrides(DEFAULTS, file_cfg)
    merged = _apply_overrides(merged, env_map)
    merged = _apply_overrides(merged, cli_overrides)

    merged = resolve_paths(merged, config_path, cli_overrides)
    return merged, compute_params_hash(merged), config_path
