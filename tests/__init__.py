"""
Test suite for exactnum

Contains:
- tests/conftest.py    : engine lifecycle fixtures
- tests/unit/          : Unit tests for individual modules
"""
