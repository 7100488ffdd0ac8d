"""Batch jobs for the issue escalation worker."""
