"""
mdbench - synthetic workload engine for graph metadata stores.
"""

__version__ = "0.1.0"
