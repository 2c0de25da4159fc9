"""
arimafit test suite.

Shared fixtures live in ``tests/conftest.py``; simulated series are generated
from seeded NumPy generators so every run sees the same data.
"""
