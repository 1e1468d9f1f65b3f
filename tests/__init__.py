"""
SVAR-IV Toolbox Test Suite

Tests for the reduced-form estimators, the MA representation, the weak-IV
robust and delta-method confidence sets and the supporting core modules.
"""
