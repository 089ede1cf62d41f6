"""Shared fixtures for sharegate tests."""

from __future__ import annotations

import os
from typing import TYPE_CHECKING

import pytest
from sqlmodel import Session, SQLModel, create_engine

import sharegate.models  # noqa: F401  (registers tables on SQLModel.metadata)
from sharegate.fs.ignore import DEFAULT_ENV_VAR, reset_default_ignore_rules

if TYPE_CHECKING:
    from collections.abc import Callable, Iterator
    from pathlib import Path

    from sqlalchemy import Engine


@pytest.fixture(autouse=True)
def _isolated_ignore_rules(monkeypatch: pytest.MonkeyPatch) -> Iterator[None]:
    """Every test starts without operator ignore rules and an empty default cache."""
    monkeypatch.delenv(DEFAULT_ENV_VAR, raising=False)
    reset_default_ignore_rules()
    yield
    reset_default_ignore_rules()


@pytest.fixture
def engine() -> Engine:
    """In-memory SQLite engine with all tables created."""
    eng = create_engine("sqlite://", echo=False)
    SQLModel.metadata.create_all(eng)
    return eng


@pytest.fixture
def session(engine: Engine) -> Iterator[Session]:
    """SQLModel session bound to the in-memory engine, rolled back after each test."""
    with Session(engine) as s:
        s.begin()
        yield s
        s.rollback()


def _make_symlink(link: Path, target: Path) -> None:
    try:
        os.symlink(target, link, target_is_directory=True)
    except (OSError, NotImplementedError):
        pytest.skip("symlinks not supported on this platform")


@pytest.fixture
def symlink() -> Callable[[Path, Path], None]:
    """Create a directory symlink, skipping the test where that is not possible."""
    return _make_symlink


@pytest.fixture
def upload_root(tmp_path: Path) -> Path:
    """Upload tree used across access and gate tests.

    root/
      reports/drafts/q1.txt
      private/secret.txt
      archive/level1/level2/deep.txt
      bob/notes.txt
      trash/old/
      profile_pics/
      .hidden/
      @eaDir/
      readme.txt
    """
    root = tmp_path / "uploads"
    (root / "reports" / "drafts").mkdir(parents=True)
    (root / "reports" / "drafts" / "q1.txt").write_text("q1")
    (root / "private").mkdir()
    (root / "private" / "secret.txt").write_text("s")
    (root / "archive" / "level1" / "level2").mkdir(parents=True)
    (root / "archive" / "level1" / "level2" / "deep.txt").write_text("d")
    (root / "bob").mkdir()
    (root / "bob" / "notes.txt").write_text("n")
    (root / "trash" / "old").mkdir(parents=True)
    (root / "profile_pics").mkdir()
    (root / ".hidden").mkdir()
    (root / "@eaDir").mkdir()
    (root / "readme.txt").write_text("hello")
    return root
