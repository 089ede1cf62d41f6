"""Tests for GateConfig — environment loading and gate construction."""

from __future__ import annotations

from pathlib import Path

import pytest

from sharegate.config import GateConfig
from sharegate.fs.exceptions import ConfigurationError
from sharegate.fs.gate import AccessGate


class TestFromEnv:
    def test_minimal(self, tmp_path):
        config = GateConfig.from_env({"SHAREGATE_UPLOAD_ROOT": str(tmp_path)})
        assert config.upload_root == tmp_path
        assert config.ignore_regex == ""
        assert config.probe_depth == 2

    def test_all_values(self, tmp_path):
        config = GateConfig.from_env(
            {
                "SHAREGATE_UPLOAD_ROOT": str(tmp_path),
                "SHAREGATE_IGNORE_REGEX": "^\\.\n/tmp$/i",
                "SHAREGATE_PROBE_DEPTH": "3",
            }
        )
        assert config.probe_depth == 3
        assert len(config.build_ignore_rules()) == 2

    def test_reads_process_environment(self, tmp_path, monkeypatch):
        monkeypatch.setenv("SHAREGATE_UPLOAD_ROOT", str(tmp_path))
        assert GateConfig.from_env().upload_root == tmp_path

    def test_missing_root(self):
        with pytest.raises(ConfigurationError, match="SHAREGATE_UPLOAD_ROOT"):
            GateConfig.from_env({})

    def test_bad_depth(self, tmp_path):
        with pytest.raises(ConfigurationError, match="integer"):
            GateConfig.from_env(
                {"SHAREGATE_UPLOAD_ROOT": str(tmp_path), "SHAREGATE_PROBE_DEPTH": "deep"}
            )

    def test_negative_depth(self, tmp_path):
        with pytest.raises(ConfigurationError):
            GateConfig(upload_root=tmp_path, probe_depth=-1)


class TestBuildGate:
    def test_gate_uses_config(self, upload_root):
        config = GateConfig(upload_root=upload_root, ignore_regex="^priv", probe_depth=1)
        gate = config.build_gate()
        assert isinstance(gate, AccessGate)
        assert gate.upload_root == upload_root.resolve()
        assert gate.probe_depth == 1
        assert gate.ignore_rules.matches("private")

    def test_string_root(self, upload_root):
        config = GateConfig(upload_root=str(upload_root))
        assert isinstance(config.upload_root, Path)
