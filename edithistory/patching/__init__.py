"""
Patch Engine Adapters
=====================

Adapters binding the PatchEngine protocol to concrete diff libraries.
The default engine wraps diff-match-patch, the library that produces the
reverse deltas stored in edit-history archives.
"""

from .dmp_engine import DiffMatchPatchEngine

__all__ = ['DiffMatchPatchEngine']
