"""Shared test constants for envelope and receipt tests."""
