"""Utility helpers for mdd."""
