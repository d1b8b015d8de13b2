"""
act-engine - package root

File: src/act_engine/__init__.py
Last updated: 2026-10-19

Purpose
- Package root for the deterministic FORM-to-code compiler pipeline.

Functional requirements
- Must not have side effects at import time (no config loading, no logging init).
- Heavy submodules are imported by callers, not here.
"""

__version__ = "0.1.0"

__all__ = ["__version__"]
