"""
JSON Schema контракты числовых значений

Внешнее представление Integer / Rational и снапшота кучи проверяется по
формальным схемам из contracts/schema/ (Draft 2020-12, jsonschema).

Контракты:
- integer_value   знак + представление + ширина limb + limbs (младший первым)
- rational_value  пара integer_value, знаменатель строго положителен
- heap_snapshot   Heap.snapshot(): счётчики и живые блоки

Схемы загружаются один раз на процесс; каталог можно переопределить
переменной окружения EXACTNUM_SCHEMA_DIR (например, для установленного
пакета без исходного дерева).
"""

import json
import os
from functools import lru_cache
from pathlib import Path
from typing import Any, Dict, Iterator, List, Optional, Tuple

import jsonschema
from jsonschema import Draft202012Validator, ValidationError

SCHEMA_DIR_ENV = "EXACTNUM_SCHEMA_DIR"

CONTRACTS: Tuple[str, ...] = ("integer_value", "rational_value", "heap_snapshot")


def default_schema_dir() -> Path:
    """contracts/schema/ в корне проекта (или из EXACTNUM_SCHEMA_DIR)."""
    override = os.environ.get(SCHEMA_DIR_ENV)
    if override:
        return Path(override)
    return Path(__file__).resolve().parents[3] / "contracts" / "schema"


# =============================================================================
# SCHEMA LOADER
# =============================================================================


class SchemaLoader:
    """
    Загрузчик и кэш JSON Schema контрактов.

    Каждая схема проходит мета-валидацию Draft 2020-12 при первой загрузке.
    """

    def __init__(self, schema_dir: Optional[Path] = None):
        self._schema_dir = Path(schema_dir) if schema_dir is not None else default_schema_dir()
        if not self._schema_dir.is_dir():
            raise RuntimeError(f"Schema directory not found: {self._schema_dir}")
        self._schemas: Dict[str, Dict[str, Any]] = {}

    @property
    def schema_dir(self) -> Path:
        return self._schema_dir

    def available(self) -> List[str]:
        """Имена схем в каталоге (без расширения)."""
        return sorted(path.stem for path in self._schema_dir.glob("*.json"))

    def load_schema(self, schema_name: str) -> Dict[str, Any]:
        """
        Загрузка схемы контракта.

        Args:
            schema_name: Имя контракта без расширения ('integer_value')

        Returns:
            Схема как dict

        Raises:
            FileNotFoundError: Файла схемы нет
            ValueError: Файл не является валидной JSON Schema
        """
        cached = self._schemas.get(schema_name)
        if cached is not None:
            return cached

        schema_path = self._schema_dir / f"{schema_name}.json"
        if not schema_path.exists():
            raise FileNotFoundError(f"Schema not found: {schema_path}")

        with open(schema_path, "r", encoding="utf-8") as f:
            schema = json.load(f)

        try:
            Draft202012Validator.check_schema(schema)
        except jsonschema.SchemaError as e:
            raise ValueError(f"Invalid JSON Schema in {schema_name}.json: {e.message}") from e

        self._schemas[schema_name] = schema
        return schema


@lru_cache(maxsize=1)
def _default_loader() -> SchemaLoader:
    return SchemaLoader()


@lru_cache(maxsize=None)
def _compiled(schema_name: str) -> Draft202012Validator:
    return Draft202012Validator(_default_loader().load_schema(schema_name))


# =============================================================================
# CONTRACT VALIDATORS
# =============================================================================


class ContractValidator:
    """Проверка данных против одного контракта."""

    schema_name: str = ""

    def __init__(self, schema_name: Optional[str] = None):
        if schema_name is not None:
            self.schema_name = schema_name
        if self.schema_name not in CONTRACTS:
            raise ValueError(f"unknown contract: {self.schema_name!r}")
        self.validator = _compiled(self.schema_name)
        self.schema = self.validator.schema

    def validate(self, data: Dict[str, Any]) -> None:
        """
        Raises:
            ValidationError: Данные не соответствуют контракту
        """
        self.validator.validate(data)

    def is_valid(self, data: Dict[str, Any]) -> bool:
        return self.validator.is_valid(data)

    def iter_errors(self, data: Dict[str, Any]) -> Iterator[ValidationError]:
        return self.validator.iter_errors(data)

    def describe_errors(self, data: Dict[str, Any]) -> List[str]:
        """
        Все нарушения в виде "<json path>: <сообщение>", по порядку пути.
        """
        errors = sorted(self.iter_errors(data), key=lambda e: list(e.absolute_path))
        return [f"{error.json_path}: {error.message}" for error in errors]


class IntegerValueValidator(ContractValidator):
    schema_name = "integer_value"


class RationalValueValidator(ContractValidator):
    schema_name = "rational_value"


class HeapSnapshotValidator(ContractValidator):
    schema_name = "heap_snapshot"


# =============================================================================
# CONVENIENCE FUNCTIONS
# =============================================================================


def validate_integer_value(data: Dict[str, Any]) -> None:
    """
    Raises:
        ValidationError: data не является integer_value
    """
    IntegerValueValidator().validate(data)


def validate_rational_value(data: Dict[str, Any]) -> None:
    """
    Raises:
        ValidationError: data не является rational_value
    """
    RationalValueValidator().validate(data)


def validate_heap_snapshot(data: Dict[str, Any]) -> None:
    """
    Raises:
        ValidationError: data не является heap_snapshot
    """
    HeapSnapshotValidator().validate(data)


__all__ = [
    "CONTRACTS",
    "SCHEMA_DIR_ENV",
    "ValidationError",
    "default_schema_dir",
    "SchemaLoader",
    "ContractValidator",
    "IntegerValueValidator",
    "RationalValueValidator",
    "HeapSnapshotValidator",
    "validate_integer_value",
    "validate_rational_value",
    "validate_heap_snapshot",
]
