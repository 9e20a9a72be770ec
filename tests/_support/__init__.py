"""
Test support utilities for intent-spine tests.

Helpers that are not fixtures but are shared by several test modules:
sample values for every parameter type and type slot, a dispatch table
that records what it dispatched, and shortcuts for driving the simulated
ledger to a resolved outcome.
"""
