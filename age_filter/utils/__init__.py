"""Utility helpers for the registry age filter."""
