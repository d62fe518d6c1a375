"""
EngineConfig — Конфигурация числового движка

Immutable Pydantic модели:
- EngineConfig: ширина limb, граница immediate-представления, порог
  сборки мусора, политика видимости стека
- HeapStats: снапшот счётчиков кучи

Конфигурация задаётся один раз при init() и не меняется во время работы
движка.
"""

import os
from enum import Enum
from typing import Final

from pydantic import BaseModel, Field, field_validator


# =============================================================================
# ПАРАМЕТРЫ ПО УМОЛЧАНИЮ
# =============================================================================

# Ширина limb (бит) — одно машинное слово многословного целого
DEFAULT_LIMB_BITS: Final[int] = 64

# Знаковая ширина immediate-представления: [-2**60, 2**60 - 1]
DEFAULT_IMMEDIATE_BITS: Final[int] = 61

# Количество аллокаций между сборками мусора
DEFAULT_GC_THRESHOLD: Final[int] = 4096

# Максимальная глубина вложенности guard-фреймов
DEFAULT_MAX_GUARD_DEPTH: Final[int] = 1024

SUPPORTED_LIMB_BITS: Final[tuple[int, ...]] = (8, 16, 32, 64)

ENV_PREFIX: Final[str] = "EXACTNUM_"


# =============================================================================
# ENUMS
# =============================================================================


class GuardPolicy(str, Enum):
    """
    Политика видимости стека для сборщика.

    AMBIENT: весь стек вызовов виден сборщику (базовый корневой фрейм
        существует всегда), guard — дешёвый маркер вложенности.
    EXPLICIT: корнями являются только handles, зарегистрированные в
        активном guard-фрейме; аллокации вне guard запрещены.
    """

    AMBIENT = "AMBIENT"
    EXPLICIT = "EXPLICIT"


# =============================================================================
# MODELS
# =============================================================================


class EngineConfig(BaseModel):
    """Конфигурация числового движка."""

    limb_bits: int = Field(
        DEFAULT_LIMB_BITS, description="Ширина limb в битах (8/16/32/64)"
    )
    immediate_bits: int = Field(
        DEFAULT_IMMEDIATE_BITS,
        ge=8,
        le=64,
        description="Знаковая ширина immediate-представления (бит)",
    )
    gc_threshold: int = Field(
        DEFAULT_GC_THRESHOLD, ge=1, description="Аллокаций между сборками"
    )
    guard_policy: GuardPolicy = Field(
        GuardPolicy.AMBIENT, description="Политика видимости стека"
    )
    max_guard_depth: int = Field(
        DEFAULT_MAX_GUARD_DEPTH, ge=1, description="Максимальная глубина guard"
    )

    model_config = {"frozen": True}

    @field_validator("limb_bits")
    @classmethod
    def validate_limb_bits(cls, v: int) -> int:
        """Проверка, что ширина limb — поддерживаемое машинное слово"""
        if v not in SUPPORTED_LIMB_BITS:
            raise ValueError(
                f"limb_bits must be one of {SUPPORTED_LIMB_BITS}, got {v}"
            )
        return v

    @staticmethod
    def from_env() -> "EngineConfig":
        """
        Загрузка конфигурации из переменных окружения EXACTNUM_*.

        Незаданные переменные берут значения по умолчанию.

        Raises:
            pydantic.ValidationError: Значение не число, вне диапазона или
                неизвестная политика
        """
        values = {}
        for field_name in ("limb_bits", "immediate_bits", "gc_threshold", "max_guard_depth"):
            raw = os.environ.get(ENV_PREFIX + field_name.upper(), "").strip()
            if raw:
                values[field_name] = raw
        policy = os.environ.get(ENV_PREFIX + "GUARD_POLICY", "").strip().upper()
        if policy:
            values["guard_policy"] = policy
        return EngineConfig(**values)


class HeapStats(BaseModel):
    """Снапшот счётчиков кучи."""

    allocations_total: int = Field(..., ge=0, description="Всего аллокаций")
    allocations_since_collect: int = Field(
        ..., ge=0, description="Аллокаций с последней сборки"
    )
    collections: int = Field(..., ge=0, description="Выполнено сборок")
    live_bags: int = Field(..., ge=0, description="Живых блоков")
    freed_total: int = Field(..., ge=0, description="Всего освобождено блоков")
    capacity: int = Field(..., ge=0, description="Размер арены (слотов)")

    model_config = {"frozen": True}


__all__ = [
    "DEFAULT_LIMB_BITS",
    "DEFAULT_IMMEDIATE_BITS",
    "DEFAULT_GC_THRESHOLD",
    "DEFAULT_MAX_GUARD_DEPTH",
    "SUPPORTED_LIMB_BITS",
    "GuardPolicy",
    "EngineConfig",
    "HeapStats",
]
