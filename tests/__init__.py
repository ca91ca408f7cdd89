"""
Test suite for ledger scalars

Contains:
- tests/unit/          : Unit tests for individual modules
"""
