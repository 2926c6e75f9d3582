"""Tests for durable JSON record storage."""

import json

from buyan_studio.storage import Storage


def test_records_missing_by_default(storage):
    assert storage.get_model() is None
    assert storage.get_assets() is None
    assert storage.get_backup_handle() is None


def test_model_roundtrip(storage):
    storage.save_model({"characters": [], "language": "zh"})
    assert storage.get_model() == {"characters": [], "language": "zh"}


def test_assets_roundtrip(storage):
    storage.save_assets({"口": "<svg/>", "日": "<svg></svg>"})
    assert storage.get_assets() == {"口": "<svg/>", "日": "<svg></svg>"}


def test_delete_asset(storage):
    storage.save_assets({"口": "<svg/>", "日": "<svg/>"})
    assert storage.delete_asset("口") is True
    assert storage.get_assets() == {"日": "<svg/>"}
    assert storage.delete_asset("口") is False


def test_delete_asset_without_record(storage):
    assert storage.delete_asset("口") is False


def test_clear_assets(storage):
    storage.save_assets({"口": "<svg/>"})
    storage.clear_assets()
    assert storage.get_assets() == {}


def test_backup_handle(storage):
    storage.save_backup_handle("/home/me/backup.json")
    assert storage.get_backup_handle() == "/home/me/backup.json"


def test_records_share_prefix(tmp_path):
    s = Storage(tmp_path, prefix="studio")
    s.save_model({})
    s.save_assets({})
    s.save_backup_handle("x")
    names = sorted(p.name for p in tmp_path.iterdir())
    assert names == [
        "studio-backup-handle.json",
        "studio-model.json",
        "studio-simple-char-svgs.json",
    ]


def test_unicode_written_readably(tmp_path):
    s = Storage(tmp_path)
    s.save_assets({"口": "<svg/>"})
    raw = (tmp_path / "buyan-studio-simple-char-svgs.json").read_text(encoding="utf-8")
    assert "口" in raw
    assert json.loads(raw) == {"口": "<svg/>"}
