"""Shared text helpers."""
