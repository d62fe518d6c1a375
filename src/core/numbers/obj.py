"""
Obj — Handle одного числового значения движка

Handle хранит ровно одну непрозрачную ссылку движка и сам движок.
Значения неизменяемы, поэтому копирование — алиасинг: copy/deepcopy
возвращают тот же handle, аллокаций нет.

Дисциплина корней:
- Handle с boxed-ссылкой регистрируется во внутреннем guard-фрейме при
  создании
- Перед каждым делегированным вызовом движка handles-операнды
  регистрируются во внутреннем фрейме (они должны пережить сборку,
  которую может запустить вызов)
"""

from typing import Any, Optional, Tuple

from src.core.engine.kernel import NumericEngine
from src.core.engine.representation import BagRef, Immediate, Ref
from src.core.engine.runtime import get_engine
from src.core.errors import EngineNotInitializedError, InvariantViolationError


class Obj:
    """
    Минимальная обёртка над непрозрачной ссылкой движка.

    to_string() голого Obj возвращает "" — текстовое представление
    определяют только Integer и Rational.
    """

    __slots__ = ("_ref", "_engine", "__weakref__")

    def __init__(self, ref: Optional[Ref] = None):
        self._engine: NumericEngine = get_engine()
        self._ref: Ref = Immediate(0) if ref is None else ref
        self._root()

    @classmethod
    def _wrap(cls, engine: NumericEngine, ref: Ref) -> "Obj":
        """Handle для ссылки, только что полученной от движка."""
        handle = cls.__new__(cls)
        handle._engine = engine
        handle._ref = ref
        handle._root()
        return handle

    def _root(self) -> None:
        if isinstance(self._ref, BagRef):
            self._engine.roots.register(self)

    @staticmethod
    def _call(
        engine: NumericEngine, method: str, *operands: "Obj", args: Tuple[Any, ...] = ()
    ) -> Any:
        """
        Вызов операции движка над handles.

        args — дополнительные аргументы, не являющиеся handles (основание,
        ширина и т.п.).

        Raises:
            EngineNotInitializedError: Движок остановлен
            InvariantViolationError: Handles разных движков
        """
        if engine.closed:
            raise EngineNotInitializedError(method, "engine shut down")
        for operand in operands:
            if operand._engine is not engine:
                error = InvariantViolationError(
                    method, "handles belong to different engines", *operands
                )
                engine.report(error)
                raise error
        engine.roots.register(*operands)
        refs = [operand._ref for operand in operands]
        return getattr(engine, method)(*refs, *args)

    def _delegate(self, method: str, *operands: "Obj", args: Tuple[Any, ...] = ()) -> Any:
        return self._call(self._engine, method, self, *operands, args=args)

    # -------------------------------------------------------------------------
    # Копирование и сравнение
    # -------------------------------------------------------------------------

    def __copy__(self) -> "Obj":
        return self

    def __deepcopy__(self, memo) -> "Obj":
        return self

    def __eq__(self, other: Any) -> bool:
        if not isinstance(other, Obj):
            return NotImplemented
        return bool(self._delegate("eq", other))

    def __ne__(self, other: Any) -> bool:
        result = self.__eq__(other)
        if result is NotImplemented:
            return result
        return not result

    __hash__ = None

    def to_string(self, base: int = 10) -> str:
        return ""

    def __repr__(self) -> str:
        return f"{type(self).__name__}({self._ref!r})"


__all__ = ["Obj"]
