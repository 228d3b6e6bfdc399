"""
Checkstate: Application Package Initializer
=============================================

What: Marks the `checkstate` directory as a Python package.
Who:  Used by uvicorn (`checkstate.main:app`), pytest and the console script.

Architecture Note:

    ┌─────────────────────────────────────┐
    │           Routes (API Layer)        │  ← HTTP concerns only
    ├─────────────────────────────────────┤
    │     Services (CheckStore)           │  ← marker-file presence store
    ├─────────────────────────────────────┤
    │         Filesystem (data_dir)       │  ← <md_id>/<check_id> files
    └─────────────────────────────────────┘
"""

__version__ = "1.0.0"
