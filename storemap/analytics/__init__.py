"""Aggregate and query functions over the loaded collections."""
