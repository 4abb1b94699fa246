"""Utility helpers for the multi-wallet orchestrator."""
