"""Scoring engines for the AI Catalyst workshop platform.

Implements the deterministic workshop steps:
  Reconciliation → Survey readiness → Challenge → Validation (confidence)
  → Prioritization (value / readiness matrix)
"""
