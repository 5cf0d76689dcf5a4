"""Run orchestration."""
