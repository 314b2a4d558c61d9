"""Test configuration and fixtures for the structured editor core.

The fixtures build small documents in a fresh :class:`FlatStore`; helpers in
:mod:`tests.helpers` look up the keys of their parts so that tests can place
cursors without hard-coding generated keys.
"""

import pytest
from pathlib import Path
from typing import Any, Callable, List

# Add project root to path
import sys
sys.path.insert(0, str(Path(__file__).parent.parent))

from structured_editor.config import ConfigManager
from structured_editor.core.models import ROOT_KEY
from structured_editor.core.nodes import RootNode
from structured_editor.core.nodes.schema import DOCUMENT_REGISTRY, ROOT
from structured_editor.core.services import CommandDispatcher
from structured_editor.core.store import FlatStore


@pytest.fixture(autouse=True)
def isolated_config(tmp_path, monkeypatch):
    """Keep user configuration out of tests and reload it for every test."""
    config_dir = tmp_path / "user_config"
    config_dir.mkdir()
    monkeypatch.setenv("STRUCTURED_EDITOR_CONFIG_DIR", str(config_dir))
    ConfigManager.reset()
    yield config_dir
    ConfigManager.reset()


@pytest.fixture
def store():
    """Creates an empty FlatStore."""
    return FlatStore()


@pytest.fixture
def registry():
    return DOCUMENT_REGISTRY


@pytest.fixture
def dispatcher(registry):
    """Creates a CommandDispatcher for the document schema."""
    return CommandDispatcher(registry)


@pytest.fixture
def make_document() -> Callable[..., FlatStore]:
    """Factory storing a JSON document under the root of a new store."""
    def _make(json: List[Any], root: RootNode = ROOT) -> FlatStore:
        new_store = FlatStore()
        new_store.update(lambda tx: root.attach_root(tx, ROOT_KEY, json))
        return new_store
    return _make
