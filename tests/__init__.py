"""
Test suite for the remanent engine

Contains:
- tests/unit/          : Unit tests for individual modules
"""
