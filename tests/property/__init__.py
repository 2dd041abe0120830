"""
Rivet - Property-Based Testing Suite

Hypothesis tests for the ordering and deduplication invariants of the
event bus, the listener registry and configuration merging.
"""
