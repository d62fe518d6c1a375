"""
Tests for JSON Schema Contract Validators

Комплексное тестирование JSON Schema валидаторов:
- Валидность самих схем
- Валидация правильных данных (экспорт Integer/Rational/Heap)
- Детекция нарушений required полей и constraints (enum/min/max)
- Round trip через to_contract/from_contract
"""

import copy

import pytest
from jsonschema import ValidationError

from src.core.contracts import (
    CONTRACTS,
    SCHEMA_DIR_ENV,
    ContractValidator,
    HeapSnapshotValidator,
    IntegerValueValidator,
    RationalValueValidator,
    SchemaLoader,
    validate_heap_snapshot,
    validate_integer_value,
    validate_rational_value,
)
from src.core.numbers import Integer, Rational


@pytest.fixture
def valid_integer_value():
    """Валидный integer_value (2**64 + 5, 64-битные limbs)."""
    return {
        "schema_version": "1",
        "sign": 1,
        "representation": "boxed",
        "limb_bits": 64,
        "limbs": [5, 1],
    }


# =============================================================================
# SCHEMAS
# =============================================================================


class TestSchemaLoader:
    """Тесты загрузчика схем"""

    @pytest.mark.parametrize("name", ["integer_value", "rational_value", "heap_snapshot"])
    def test_schemas_load(self, name: str) -> None:
        schema = SchemaLoader().load_schema(name)
        assert schema["$schema"] == "https://json-schema.org/draft/2020-12/schema"

    def test_missing_schema(self) -> None:
        with pytest.raises(FileNotFoundError):
            SchemaLoader().load_schema("no_such_contract")

    def test_available(self) -> None:
        assert SchemaLoader().available() == sorted(CONTRACTS)

    def test_schema_dir_override(self, tmp_path, monkeypatch) -> None:
        (tmp_path / "broken.json").write_text('{"type": 12}', encoding="utf-8")
        monkeypatch.setenv(SCHEMA_DIR_ENV, str(tmp_path))

        loader = SchemaLoader()
        assert loader.schema_dir == tmp_path
        with pytest.raises(ValueError, match="Invalid JSON Schema"):
            loader.load_schema("broken")

    def test_missing_schema_dir(self, tmp_path) -> None:
        with pytest.raises(RuntimeError):
            SchemaLoader(tmp_path / "absent")

    def test_unknown_contract(self) -> None:
        with pytest.raises(ValueError, match="unknown contract"):
            ContractValidator("trade")


# =============================================================================
# INTEGER VALUE
# =============================================================================


class TestIntegerValueContract:
    """Тесты integer_value"""

    def test_valid(self, valid_integer_value) -> None:
        validate_integer_value(valid_integer_value)
        assert IntegerValueValidator().is_valid(valid_integer_value)

    def test_missing_required(self, valid_integer_value) -> None:
        del valid_integer_value["limbs"]
        with pytest.raises(ValidationError):
            validate_integer_value(valid_integer_value)

    def test_zero_must_have_no_limbs(self, valid_integer_value) -> None:
        valid_integer_value["sign"] = 0
        with pytest.raises(ValidationError):
            validate_integer_value(valid_integer_value)

    def test_nonzero_needs_limbs(self, valid_integer_value) -> None:
        valid_integer_value["limbs"] = []
        with pytest.raises(ValidationError):
            validate_integer_value(valid_integer_value)

    def test_limb_range_follows_width(self, valid_integer_value) -> None:
        valid_integer_value["limb_bits"] = 8
        valid_integer_value["limbs"] = [256]
        errors = list(IntegerValueValidator().iter_errors(valid_integer_value))
        assert errors

    def test_describe_errors(self, valid_integer_value) -> None:
        valid_integer_value["limbs"] = [-1, 1]
        messages = IntegerValueValidator().describe_errors(valid_integer_value)
        assert any(message.startswith("$.limbs[0]:") for message in messages)
        valid_integer_value["limbs"] = [5, 1]
        assert IntegerValueValidator().describe_errors(valid_integer_value) == []

    def test_bad_enum(self, valid_integer_value) -> None:
        valid_integer_value["limb_bits"] = 12
        with pytest.raises(ValidationError):
            validate_integer_value(valid_integer_value)

    def test_export(self) -> None:
        data = Integer(-(2**70)).to_contract()
        validate_integer_value(data)
        assert data["sign"] == -1
        assert data["limbs"] == [0, 64]
        assert data["representation"] == "boxed"

        zero = Integer(0).to_contract()
        validate_integer_value(zero)
        assert zero["limbs"] == []
        assert zero["representation"] == "immediate"

    def test_round_trip(self) -> None:
        for value in (0, 1, -1, 2**60, -(2**200) - 7):
            assert Integer.from_contract(Integer(value).to_contract()) == value

    def test_from_contract_other_limb_width(self) -> None:
        data = {
            "schema_version": "1",
            "sign": -1,
            "representation": "boxed",
            "limb_bits": 8,
            "limbs": [0, 1],
        }
        assert Integer.from_contract(data) == -256

    def test_from_contract_inconsistent_sign(self, valid_integer_value) -> None:
        valid_integer_value["limbs"] = [0, 0]
        with pytest.raises(ValueError, match="inconsistent"):
            Integer.from_contract(valid_integer_value)

    def test_from_contract_validates(self, valid_integer_value) -> None:
        valid_integer_value["sign"] = 2
        with pytest.raises(ValidationError):
            Integer.from_contract(valid_integer_value)


# =============================================================================
# RATIONAL VALUE
# =============================================================================


class TestRationalValueContract:
    """Тесты rational_value"""

    def test_export_and_round_trip(self) -> None:
        r = Rational(-(2**70), 3)
        data = r.to_contract()
        validate_rational_value(data)
        assert RationalValueValidator().is_valid(data)
        assert Rational.from_contract(data) == r

    def test_integral_value_has_unit_denominator(self) -> None:
        data = Rational(6, 3).to_contract()
        assert data["denominator"]["limbs"] == [1]
        assert Rational.from_contract(data) == 2

    def test_negative_denominator_rejected(self) -> None:
        data = Rational(1, 3).to_contract()
        bad = copy.deepcopy(data)
        bad["denominator"]["sign"] = -1
        with pytest.raises(ValidationError):
            validate_rational_value(bad)

    def test_from_contract_reduces(self) -> None:
        data = {
            "schema_version": "1",
            "numerator": Integer(4).to_contract(),
            "denominator": Integer(6).to_contract(),
        }
        r = Rational.from_contract(data)
        assert r.num() == 2
        assert r.den() == 3


# =============================================================================
# HEAP SNAPSHOT
# =============================================================================


class TestHeapSnapshotContract:
    """Тесты heap_snapshot"""

    def test_snapshot_valid(self, small_engine) -> None:
        values = [Integer(1000), Rational(1000, 3), Rational(1, 1000)]
        snapshot = small_engine.heap.snapshot()

        validate_heap_snapshot(snapshot)
        assert HeapSnapshotValidator().is_valid(snapshot)
        kinds = [bag["kind"] for bag in snapshot["bags"]]
        assert "int" in kinds and "rat" in kinds
        assert len(values) == 3

    def test_snapshot_after_collection(self, small_engine) -> None:
        Integer(1000) * 1000
        small_engine.collect()
        snapshot = small_engine.heap.snapshot()
        validate_heap_snapshot(snapshot)
        assert snapshot["stats"]["collections"] == 1

    def test_snapshot_bad_kind(self, small_engine) -> None:
        snapshot = small_engine.heap.snapshot()
        snapshot["bags"].append({"index": 0, "generation": 0, "kind": "float"})
        with pytest.raises(ValidationError):
            validate_heap_snapshot(snapshot)
