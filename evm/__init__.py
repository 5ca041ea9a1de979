"""Emacs Version Manager (Python-first, filesystem-driven).

Core design goals:
- Side-by-side installations, one directory per package
- Exactly one active package, selected through shims
- Idempotent lifecycle operations
- Persisted configuration as the single record of the active package
- Centralized logging
"""

__all__ = []
