"""Reconciliation and conflict engine for exercise records."""
