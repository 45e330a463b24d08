"""
License Calculator - Source Package

Searchable price list of software licenses with an annual cost calculator
and an editor for the list itself.

DESIGN PRINCIPLES:
1. One Store, many views: every surface reads from and subscribes to it
2. Storage is a mirror of the Store, and the backend is swappable
3. Nothing without a name is ever written to storage
4. Every save, import and bulk change is auditable
"""

__version__ = "1.0.0"
__author__ = "License Calculator Team"
