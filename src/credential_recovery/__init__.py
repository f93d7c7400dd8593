"""Operator credential recovery tooling."""
