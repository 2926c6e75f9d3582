"""Tests for buyan_studio.models."""

import pytest
from pydantic import ValidationError

from buyan_studio.models import (
    BackupSnapshot,
    CompoundCharacter,
    DisplayConfig,
    SessionModel,
    SimpleCharacter,
)


def _simple(identity: str = "口") -> SimpleCharacter:
    return SimpleCharacter(identity=identity, width=390, height=390, x=10, y=10)


class TestSimpleCharacter:
    def test_required_fields(self) -> None:
        c = _simple()
        assert c.kind == "simple"
        assert c.identity == "口"
        assert (c.x, c.y, c.width, c.height) == (10, 10, 390, 390)

    def test_identity_must_be_one_code_point(self) -> None:
        with pytest.raises(ValidationError):
            SimpleCharacter(identity="口口", width=1, height=1, x=0, y=0)
        with pytest.raises(ValidationError):
            SimpleCharacter(identity="", width=1, height=1, x=0, y=0)

    def test_serialise_roundtrip(self) -> None:
        c = _simple("木")
        assert SimpleCharacter.model_validate(c.model_dump()) == c


class TestCompoundCharacter:
    def test_components_default_to_empty(self) -> None:
        c = CompoundCharacter(identity="林")
        assert c.kind == "compound"
        assert c.components == []

    def test_nested_roundtrip_keeps_variants(self) -> None:
        inner = CompoundCharacter(identity="林", components=[_simple("木"), _simple("木")])
        outer = CompoundCharacter(identity="森", components=[_simple("木"), inner])
        restored = CompoundCharacter.model_validate_json(outer.model_dump_json())
        assert restored == outer
        assert isinstance(restored.components[0], SimpleCharacter)
        assert isinstance(restored.components[1], CompoundCharacter)

    def test_unknown_kind_rejected(self) -> None:
        with pytest.raises(ValidationError):
            CompoundCharacter.model_validate(
                {"identity": "林", "components": [{"kind": "radical", "identity": "木"}]}
            )


class TestDisplayConfig:
    def test_defaults(self) -> None:
        d = DisplayConfig()
        assert d.box_size == 400
        assert d.border_size == 10

    def test_frozen(self) -> None:
        d = DisplayConfig()
        with pytest.raises(ValidationError):
            d.box_size = 10


class TestSessionModel:
    def test_defaults(self) -> None:
        m = SessionModel()
        assert m.characters == []
        assert m.language == "en"

    def test_mixed_list_roundtrip(self) -> None:
        m = SessionModel(characters=[
            _simple("日"),
            CompoundCharacter(identity="明", components=[_simple("日"), _simple("月")]),
        ])
        restored = SessionModel.model_validate(m.model_dump(mode="json"))
        assert restored == m


class TestBackupSnapshot:
    def test_dumps_with_wire_names(self) -> None:
        snap = BackupSnapshot(model=SessionModel(), simple_char_svgs={"口": "<svg/>"})
        dumped = snap.model_dump(by_alias=True)
        assert set(dumped) == {"model", "simpleCharSvgs"}

    def test_validates_from_wire_names(self) -> None:
        snap = BackupSnapshot.model_validate(
            {"model": {"characters": []}, "simpleCharSvgs": {"口": "<svg/>"}}
        )
        assert snap.simple_char_svgs == {"口": "<svg/>"}

    def test_missing_svgs_rejected(self) -> None:
        with pytest.raises(ValidationError):
            BackupSnapshot.model_validate({"model": {"characters": []}})
