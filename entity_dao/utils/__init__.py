"""
Utility helpers shared across the package: settings and logging.
"""
