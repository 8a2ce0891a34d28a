"""Reconciliation, rendering and orchestration for the stats card."""
