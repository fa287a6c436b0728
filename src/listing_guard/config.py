"""YAML/dict config loader for listing-guard.

Supports loading from a YAML file or a plain dict (for embedding in a
larger host config).  The engine itself never reads files or the
environment; this module is for callers.

Example YAML:

    listing_guard:
      max_input_length: 50000
      extend_defaults: true        # append to the built-in lists
      banned_phrases:
        - bargain bin
      warning_phrases:
        - ping me
      replacements:
        bargain bin: well priced
      limits:
        max_emojis: 2
        max_per_hour: 40
        safe_per_hour: 20
      markets:
        uk:
          banned_phrases:
            - cheeky price
          limits:
            max_per_day: 150
"""

from __future__ import annotations
import logging
from pathlib import Path
from typing import Any

import yaml

from .engine import DEFAULT_MAX_INPUT_LENGTH, ComplianceEngine
from .errors import ConfigError
from .rules import RuleSet, default_rules

logger = logging.getLogger(__name__)


def load_config(data: dict[str, Any] | None) -> dict[str, Any]:
    """Normalize a config dict (from YAML or inline)."""
    data = data or {}
    # Support nested under "listing_guard" key or flat
    if isinstance(data, dict) and "listing_guard" in data:
        data = data["listing_guard"] or {}
    if not isinstance(data, dict):
        raise ConfigError(f"config must be a mapping, got {type(data).__name__}")
    if not isinstance(data.get("markets") or {}, dict):
        raise ConfigError("markets must be a mapping of market name to overrides")

    return {
        "extend_defaults": bool(data.get("extend_defaults", False)),
        "banned_phrases": data.get("banned_phrases"),
        "warning_phrases": data.get("warning_phrases"),
        "replacements": data.get("replacements"),
        "limits": data.get("limits") or {},
        "markets": data.get("markets") or {},
        "max_input_length": data.get("max_input_length", DEFAULT_MAX_INPUT_LENGTH),
    }


def load_from_yaml(path: str | Path) -> dict[str, Any]:
    """Load config from a YAML file."""
    try:
        with open(path) as f:
            raw = yaml.safe_load(f)
    except (OSError, yaml.YAMLError) as exc:
        raise ConfigError(f"cannot read rules file {path}: {exc}") from exc
    logger.info("loaded listing-guard config from %s", path)
    return load_config(raw)


def _overrides(section: dict[str, Any], extend: bool, base: RuleSet) -> dict[str, Any]:
    changes: dict[str, Any] = {}
    for key in ("banned_phrases", "warning_phrases"):
        phrases = section.get(key)
        if phrases is None:
            continue
        if not isinstance(phrases, list):
            raise ConfigError(f"{key} must be a list")
        changes[key] = list(getattr(base, key)) + phrases if extend else phrases
    replacements = section.get("replacements")
    if replacements is not None:
        if not isinstance(replacements, dict):
            raise ConfigError("replacements must be a mapping")
        changes["replacements"] = {**base.replacements, **replacements} if extend else replacements
    if section.get("limits"):
        changes["limits"] = section["limits"]
    return changes


def build_rules(config: dict[str, Any], *, market: str | None = None) -> RuleSet:
    """Turn a config dict into a validated RuleSet.

    Missing keys keep their defaults.  With ``extend_defaults`` the phrase
    lists are appended to the built-in ones and replacements are merged.
    A ``market`` applies that entry of ``markets`` on top, the same way.
    """
    cfg = load_config(config)
    extend = cfg["extend_defaults"]

    rules = default_rules().with_overrides(**_overrides(cfg, extend, default_rules()))

    if market is not None:
        section = cfg["markets"].get(market)
        if section is None:
            raise ConfigError(f"unknown market {market!r}")
        if not isinstance(section, dict):
            raise ConfigError(f"market {market!r} must be a mapping")
        rules = rules.with_overrides(**_overrides(section, extend, rules))

    logger.debug(
        "built rule set: %d banned, %d warning phrases (market=%s)",
        len(rules.banned_phrases), len(rules.warning_phrases), market,
    )
    return rules


def create_engine(
    config: dict[str, Any] | None = None,
    *,
    market: str | None = None,
) -> ComplianceEngine:
    """Create a fully configured engine from a config dict."""
    cfg = load_config(config)
    return ComplianceEngine(
        build_rules(cfg, market=market), max_input_length=cfg["max_input_length"],
    )
