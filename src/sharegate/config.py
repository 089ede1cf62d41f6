"""GateConfig — process configuration for the access layer."""

from __future__ import annotations

import os
from collections.abc import Mapping
from dataclasses import dataclass
from pathlib import Path

from sharegate.fs.access import DEFAULT_PROBE_DEPTH
from sharegate.fs.exceptions import ConfigurationError
from sharegate.fs.gate import AccessGate
from sharegate.fs.ignore import DEFAULT_ENV_VAR, IgnoreRuleSet

UPLOAD_ROOT_ENV = "SHAREGATE_UPLOAD_ROOT"
PROBE_DEPTH_ENV = "SHAREGATE_PROBE_DEPTH"


@dataclass
class GateConfig:
    """Configuration for building an ``AccessGate``."""

    upload_root: Path
    """Trusted filesystem boundary for every resolved path."""

    ignore_regex: str = ""
    """Multi-line ignore patterns, one per line (bare or delimited)."""

    probe_depth: int = DEFAULT_PROBE_DEPTH
    """How many levels ``has_readable_descendant`` may look below a locked folder."""

    def __post_init__(self) -> None:
        self.upload_root = Path(self.upload_root).expanduser()
        if self.probe_depth < 0:
            raise ConfigurationError(f"probe_depth must be >= 0, got {self.probe_depth}")

    @classmethod
    def from_env(cls, environ: Mapping[str, str] | None = None) -> GateConfig:
        """Read ``SHAREGATE_UPLOAD_ROOT``, ``SHAREGATE_IGNORE_REGEX`` and ``SHAREGATE_PROBE_DEPTH``."""
        env = os.environ if environ is None else environ

        root = env.get(UPLOAD_ROOT_ENV, "").strip()
        if not root:
            raise ConfigurationError(f"{UPLOAD_ROOT_ENV} is not set")

        raw_depth = env.get(PROBE_DEPTH_ENV, "").strip()
        try:
            depth = int(raw_depth) if raw_depth else DEFAULT_PROBE_DEPTH
        except ValueError:
            raise ConfigurationError(
                f"{PROBE_DEPTH_ENV} must be an integer, got {raw_depth!r}"
            ) from None

        return cls(
            upload_root=Path(root),
            ignore_regex=env.get(DEFAULT_ENV_VAR, ""),
            probe_depth=depth,
        )

    def build_ignore_rules(self) -> IgnoreRuleSet:
        return IgnoreRuleSet.from_config(self.ignore_regex)

    def build_gate(self) -> AccessGate:
        """Create an ``AccessGate`` with this config's compiled ignore rules."""
        return AccessGate(
            self.upload_root,
            ignore_rules=self.build_ignore_rules(),
            probe_depth=self.probe_depth,
        )
