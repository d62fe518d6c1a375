"""
Heap — Управляемая сборщиком куча числовых блоков

Арена слотов со стабильными индексами и явной таблицей корней:
- alloc: аллокация блока в свободный слот (free list) или в конец арены
- deref: разыменование BagRef с проверкой поколения слота
- collect: mark (с трассировкой детей RatPair) и sweep

Сборщик не сканирует стек сам: корни передаются в collect() явно
(их собирает RootRegistry из guard-фреймов, см. guard.py).

КРИТИЧЕСКИЕ ИНВАРИАНТЫ:
1. Освобождённый слот увеличивает поколение → старые ссылки устаревают
2. Сборка не реентерабельна
3. Блоки неизменяемы: содержимое слота не меняется до освобождения
"""

import logging
from dataclasses import dataclass
from typing import Any, Dict, Iterable, List, Optional

from src.core.engine.config import EngineConfig, HeapStats
from src.core.engine.representation import Bag, BagRef, BoxedInt, RatPair, Ref
from src.core.errors import InvariantViolationError, StaleHandleError

logger = logging.getLogger(__name__)

HEAP_SNAPSHOT_SCHEMA_VERSION = "1"


@dataclass(frozen=True)
class CollectionResult:
    """Результат одной сборки мусора."""

    collection_no: int
    marked: int
    freed: int
    live: int


class Heap:
    """
    Арена блоков с mark/sweep сборкой.

    Слот хранит блок (BoxedInt/RatPair) или None, если свободен.
    """

    def __init__(self, config: EngineConfig):
        self.config = config
        self._slots: List[Optional[Bag]] = []
        self._generations: List[int] = []
        self._free: List[int] = []

        self._allocations_total = 0
        self._allocations_since_collect = 0
        self._collections = 0
        self._freed_total = 0
        self._live = 0

        self.collecting = False

    # -------------------------------------------------------------------------
    # Аллокация и разыменование
    # -------------------------------------------------------------------------

    def alloc(self, bag: Bag) -> BagRef:
        """
        Размещение блока в куче.

        Returns:
            BagRef на новый блок
        """
        if self._free:
            index = self._free.pop()
            self._slots[index] = bag
        else:
            index = len(self._slots)
            self._slots.append(bag)
            self._generations.append(0)

        self._allocations_total += 1
        self._allocations_since_collect += 1
        self._live += 1
        return BagRef(index=index, generation=self._generations[index])

    def deref(self, ref: BagRef) -> Bag:
        """
        Разыменование ссылки на блок.

        Raises:
            StaleHandleError: Если слот освобождён или переиспользован
        """
        if not self.is_live(ref):
            raise StaleHandleError(
                "Heap.deref",
                "reference to a reclaimed bag (handle was not visible to the collector)",
                ref,
            )
        return self._slots[ref.index]

    def is_live(self, ref: BagRef) -> bool:
        """Указывает ли ссылка на живой блок текущего поколения."""
        return (
            0 <= ref.index < len(self._slots)
            and self._slots[ref.index] is not None
            and self._generations[ref.index] == ref.generation
        )

    # -------------------------------------------------------------------------
    # Сборка мусора
    # -------------------------------------------------------------------------

    def should_collect(self) -> bool:
        """Достигнут ли порог аллокаций для следующей сборки."""
        return self._allocations_since_collect >= self.config.gc_threshold

    def collect(self, roots: Iterable[Ref]) -> CollectionResult:
        """
        Mark/sweep сборка.

        Args:
            roots: Ссылки, видимые сборщику (immediate игнорируются)

        Returns:
            CollectionResult со счётчиками

        Raises:
            InvariantViolationError: При реентерабельном вызове
        """
        if self.collecting:
            raise InvariantViolationError("Heap.collect", "collection is not re-entrant")

        self.collecting = True
        try:
            marked = self._mark(roots)
            freed = self._sweep(marked)
        finally:
            self.collecting = False

        self._collections += 1
        self._allocations_since_collect = 0
        self._freed_total += freed

        result = CollectionResult(
            collection_no=self._collections,
            marked=len(marked),
            freed=freed,
            live=self._live,
        )
        logger.debug(
            "collection #%d: marked=%d freed=%d live=%d",
            result.collection_no,
            result.marked,
            result.freed,
            result.live,
        )
        return result

    def _mark(self, roots: Iterable[Ref]) -> set:
        marked = set()
        pending = [ref for ref in roots if isinstance(ref, BagRef)]
        while pending:
            ref = pending.pop()
            # Устаревший корень — не наш блок, пропускаем
            if ref.index in marked or not self.is_live(ref):
                continue
            marked.add(ref.index)
            bag = self._slots[ref.index]
            if isinstance(bag, RatPair):
                for child in (bag.num, bag.den):
                    if isinstance(child, BagRef):
                        pending.append(child)
        return marked

    def _sweep(self, marked: set) -> int:
        freed = 0
        for index, bag in enumerate(self._slots):
            if bag is None or index in marked:
                continue
            self._slots[index] = None
            self._generations[index] += 1
            self._free.append(index)
            freed += 1
        self._live -= freed
        return freed

    # -------------------------------------------------------------------------
    # Диагностика
    # -------------------------------------------------------------------------

    def stats(self) -> HeapStats:
        """Снапшот счётчиков кучи."""
        return HeapStats(
            allocations_total=self._allocations_total,
            allocations_since_collect=self._allocations_since_collect,
            collections=self._collections,
            live_bags=self._live,
            freed_total=self._freed_total,
            capacity=len(self._slots),
        )

    def snapshot(self) -> Dict[str, Any]:
        """
        Снапшот кучи в формате контракта heap_snapshot.

        Returns:
            dict: версия схемы, конфигурация, счётчики, живые блоки
        """
        bags = []
        for index, bag in enumerate(self._slots):
            if bag is None:
                continue
            entry: Dict[str, Any] = {
                "index": index,
                "generation": self._generations[index],
            }
            if isinstance(bag, BoxedInt):
                entry["kind"] = "int"
                entry["sign"] = bag.sign
                entry["size"] = len(bag.limbs)
            else:
                entry["kind"] = "rat"
                entry["children"] = [
                    child.index for child in (bag.num, bag.den) if isinstance(child, BagRef)
                ]
            bags.append(entry)

        return {
            "schema_version": HEAP_SNAPSHOT_SCHEMA_VERSION,
            "limb_bits": self.config.limb_bits,
            "immediate_bits": self.config.immediate_bits,
            "stats": self.stats().model_dump(),
            "bags": bags,
        }


__all__ = [
    "HEAP_SNAPSHOT_SCHEMA_VERSION",
    "CollectionResult",
    "Heap",
]
