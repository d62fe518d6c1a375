"""
Core numeric layer: engine (representation, collector-managed heap,
stack-visibility guard), value handles (Integer, Rational), error taxonomy
and JSON contracts.

The engine must be initialized once per process before any value is
created (see src.core.engine.runtime.init).
"""
