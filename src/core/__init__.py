"""
Core domain models, exact decimal primitives, and wire contracts.

This package holds the building blocks that are independent of the engine
that orchestrates them (and of any transport layer around it).
"""
