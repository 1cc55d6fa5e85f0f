"""Unit tests for the key-value persistence backends."""

from __future__ import annotations

from pathlib import Path

import pytest

from adminflow.storage.backend import FileBackend, InMemoryBackend


@pytest.fixture(params=["memory", "file"])
def any_backend(request: pytest.FixtureRequest, tmp_path: Path):
    if request.param == "memory":
        return InMemoryBackend()
    return FileBackend(tmp_path / "state")


def test_get_set_remove(any_backend) -> None:
    assert any_backend.get("reports") is None

    any_backend.set("reports", '["a"]')
    assert any_backend.get("reports") == '["a"]'

    any_backend.set("reports", "[]")
    assert any_backend.get("reports") == "[]"

    any_backend.remove("reports")
    assert any_backend.get("reports") is None


def test_remove_missing_key_is_a_no_op(any_backend) -> None:
    any_backend.remove("never-written")
    assert any_backend.get("never-written") is None


def test_file_backend_writes_one_file_per_key(tmp_path: Path) -> None:
    root = tmp_path / "state"
    backend = FileBackend(root)

    backend.set("adminflow_report_history", "[]")
    backend.set("adminflow_workflows", "[]")

    assert sorted(p.name for p in root.iterdir()) == [
        "adminflow_report_history.json",
        "adminflow_workflows.json",
    ]


def test_file_backend_survives_new_instance(tmp_path: Path) -> None:
    FileBackend(tmp_path).set("key", "välue")
    assert FileBackend(tmp_path).get("key") == "välue"


@pytest.mark.parametrize("key", ["../escape", "a/b", "", "with space"])
def test_file_backend_rejects_unsafe_keys(tmp_path: Path, key: str) -> None:
    backend = FileBackend(tmp_path)
    with pytest.raises(ValueError):
        backend.set(key, "x")
    with pytest.raises(ValueError):
        backend.get(key)
