from __future__ import annotations

from pathlib import Path

import pytest

from pylockpanel.storage import IdentifierStore


def test_missing_file_means_unregistered(tmp_path: Path) -> None:
    assert IdentifierStore(tmp_path / "nope.json").load() is None


def test_save_then_load(tmp_path: Path) -> None:
    store = IdentifierStore(tmp_path / "nested" / "storage.json")
    store.save("  user-1  ")

    assert store.load() == "user-1"
    assert not (tmp_path / "nested" / "storage.json.tmp").exists()


@pytest.mark.parametrize("content", ["not json", "[]", '{"user_id": 7}', '{"user_id": "  "}', "{}"])
def test_unusable_documents_load_as_none(tmp_path: Path, content: str) -> None:
    path = tmp_path / "storage.json"
    path.write_text(content, encoding="utf-8")

    assert IdentifierStore(path).load() is None


def test_save_rejects_blank(tmp_path: Path) -> None:
    with pytest.raises(ValueError):
        IdentifierStore(tmp_path / "storage.json").save(" ")
