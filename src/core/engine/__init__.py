"""
Numeric engine: representation, collector-managed heap, stack-visibility
guard, and the call interface used by the value wrappers.
"""

from src.core.engine.booleans import Bool
from src.core.engine.config import (
    DEFAULT_GC_THRESHOLD,
    DEFAULT_IMMEDIATE_BITS,
    DEFAULT_LIMB_BITS,
    DEFAULT_MAX_GUARD_DEPTH,
    SUPPORTED_LIMB_BITS,
    EngineConfig,
    GuardPolicy,
    HeapStats,
)
from src.core.engine.guard import (
    GuardState,
    GuardTransition,
    RootFrame,
    RootRegistry,
    StackVisibilityGuard,
    guarded,
    stack_guard,
)
from src.core.engine.heap import HEAP_SNAPSHOT_SCHEMA_VERSION, CollectionResult, Heap
from src.core.engine.kernel import NumericEngine
from src.core.engine.representation import (
    BagRef,
    BoxedInt,
    Immediate,
    RatPair,
    Ref,
)
from src.core.engine.runtime import (
    current_engine,
    get_engine,
    init,
    is_initialized,
    shutdown,
)

__all__ = [
    # Sentinels
    "Bool",
    # Config
    "DEFAULT_LIMB_BITS",
    "DEFAULT_IMMEDIATE_BITS",
    "DEFAULT_GC_THRESHOLD",
    "DEFAULT_MAX_GUARD_DEPTH",
    "SUPPORTED_LIMB_BITS",
    "EngineConfig",
    "GuardPolicy",
    "HeapStats",
    # Representation
    "Immediate",
    "BagRef",
    "Ref",
    "BoxedInt",
    "RatPair",
    # Heap
    "HEAP_SNAPSHOT_SCHEMA_VERSION",
    "CollectionResult",
    "Heap",
    # Guard
    "GuardState",
    "GuardTransition",
    "RootFrame",
    "RootRegistry",
    "StackVisibilityGuard",
    "stack_guard",
    "guarded",
    # Kernel / runtime
    "NumericEngine",
    "init",
    "current_engine",
    "get_engine",
    "is_initialized",
    "shutdown",
]
