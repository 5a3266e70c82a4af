"""
Shared utilities for the Inference Gateway.
"""
