"""Configuration loading for amdmon.

Loads settings from TOML config files with sensible defaults.
Search order: explicit --config path → ~/.config/amdmon/config.toml → defaults only.
Command-line flags are applied on top by ``build_run_config``.
"""

from __future__ import annotations

import argparse
import math
import sys
import tomllib
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

from amdmon.rows import RowRegistry

DEFAULT_DEVICE = "/sys/class/drm/card0/device"

DEFAULT_CONFIG: dict[str, Any] = {
    "update": 2.0,
    "color": True,
    "device": DEFAULT_DEVICE,
    "disable": [],
    "log_file": "",
    "colors": {
        "label": "cyan",
        "value": "black",
        "ok": "green",
        "warn": "yellow",
        "bad": "red",
    },
}

COLOR_NAMES = ("black", "red", "green", "yellow", "blue", "magenta", "cyan", "white")

_DEFAULT_PATH = Path.home() / ".config" / "amdmon" / "config.toml"

# getch timeouts are whole milliseconds held in a C int.
MIN_INTERVAL = 0.001
MAX_INTERVAL = 86400.0


@dataclass(frozen=True)
class RunConfig:
    """Everything the dashboard loop needs, fixed once startup is done."""

    interval: float = 2.0
    use_color: bool = True
    rows: RowRegistry = field(default_factory=RowRegistry)
    device: Path = Path(DEFAULT_DEVICE)
    colors: dict[str, str] = field(
        default_factory=lambda: dict(DEFAULT_CONFIG["colors"])
    )
    log_file: Path | None = None


def _overlay(user: dict[str, Any]) -> dict[str, Any]:
    """Lay a user's TOML table over DEFAULT_CONFIG.

    Only ``[colors]`` is a table; its roles are updated one by one so a file
    can change a single colour. Unknown top-level keys are reported and dropped.
    """
    merged = dict(DEFAULT_CONFIG, colors=dict(DEFAULT_CONFIG["colors"]))
    for key, value in user.items():
        if key not in DEFAULT_CONFIG:
            print(f"amdmon: warning: unknown config key {key!r} ignored", file=sys.stderr)
        elif key == "colors" and isinstance(value, dict):
            merged["colors"].update(value)
        else:
            merged[key] = value
    return merged


def _read_toml(path: Path) -> dict[str, Any]:
    with open(path, "rb") as f:
        return tomllib.load(f)


def load_config(path: Path | None = None) -> dict[str, Any]:
    """Load configuration, overlaying user TOML on the defaults.

    Args:
        path: Explicit config file path (from --config). If None, tries the
              default location ~/.config/amdmon/config.toml.

    Raises:
        SystemExit: If an explicit path doesn't exist or can't be parsed.
    """
    if path is None:
        if not _DEFAULT_PATH.is_file():
            return _overlay({})
        try:
            return _overlay(_read_toml(_DEFAULT_PATH))
        except (OSError, tomllib.TOMLDecodeError) as e:
            print(
                f"amdmon: warning: ignoring invalid TOML in {_DEFAULT_PATH}: {e}",
                file=sys.stderr,
            )
            return _overlay({})

    if not path.is_file():
        print(f"amdmon: config file not found: {path}", file=sys.stderr)
        raise SystemExit(1)
    try:
        return _overlay(_read_toml(path))
    except (OSError, tomllib.TOMLDecodeError) as e:
        print(f"amdmon: cannot load {path}: {e}", file=sys.stderr)
        raise SystemExit(1) from e


def dump_default_config() -> str:
    """Return the default configuration as a TOML string."""
    lines = [
        "# amdmon configuration",
        "# Place this file at ~/.config/amdmon/config.toml",
        "",
        "# Seconds between refreshes",
        f"update = {DEFAULT_CONFIG['update']}",
        f"color = {'true' if DEFAULT_CONFIG['color'] else 'false'}",
        f'device = "{DEFAULT_CONFIG["device"]}"',
        "# Rows to hide, e.g. [\"fan\", \"voltage\"]",
        "disable = []",
        "# Empty disables the log file",
        f'log_file = "{DEFAULT_CONFIG["log_file"]}"',
        "",
        "[colors]",
    ]
    for role, name in DEFAULT_CONFIG["colors"].items():
        lines.append(f'{role} = "{name}"')

    return "\n".join(lines) + "\n"


def check_interval(seconds: float) -> float:
    """Return *seconds* if it can pace the refresh loop, else raise ValueError."""
    if not math.isfinite(seconds):
        raise ValueError(f"not a finite number: {seconds}")
    if not MIN_INTERVAL <= seconds <= MAX_INTERVAL:
        raise ValueError(
            f"must be between {MIN_INTERVAL:g} and {MAX_INTERVAL:g} seconds: {seconds:g}"
        )
    return seconds


def _resolve_colors(colors: dict[str, Any]) -> dict[str, str]:
    resolved: dict[str, str] = {}
    for role, default in DEFAULT_CONFIG["colors"].items():
        name = str(colors.get(role, default)).lower()
        resolved[role] = name if name in COLOR_NAMES else default
    return resolved


def _disable_tokens(value: Any) -> list[str]:
    """Accept either a TOML list of keys or a comma-separated string."""
    if isinstance(value, str):
        return [value] if value else []
    return [str(v) for v in value]


def build_run_config(config: dict[str, Any], args: argparse.Namespace) -> RunConfig:
    """Combine the loaded config with CLI overrides into a RunConfig."""
    if args.update is not None:
        interval = args.update
    else:
        try:
            interval = check_interval(float(config["update"]))
        except (TypeError, ValueError, OverflowError) as e:
            print(f"amdmon: invalid update interval {config['update']!r}: {e}", file=sys.stderr)
            raise SystemExit(1) from e
    use_color = bool(config["color"]) and not args.no_color
    device = args.device if args.device is not None else Path(config["device"])

    rows = RowRegistry()
    for csv in _disable_tokens(config.get("disable", [])):
        rows.disable_list(csv)
    for csv in args.disable or []:
        rows.disable_list(csv)

    log_file = str(config.get("log_file") or "")

    return RunConfig(
        interval=interval,
        use_color=use_color,
        rows=rows,
        device=Path(device),
        colors=_resolve_colors(config.get("colors", {})),
        log_file=Path(log_file).expanduser() if log_file else None,
    )
