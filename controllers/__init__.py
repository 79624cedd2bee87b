"""Orchestration, configuration, and CLI for skeleton toolpath routing."""
