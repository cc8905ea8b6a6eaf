"""Shared utilities: error hierarchy, structured logging, text helpers."""
