"""Atomic components: statements, pricing, turn."""
