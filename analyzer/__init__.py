"""Pronunciation analysis orchestration and domain errors."""
