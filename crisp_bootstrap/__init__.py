"""
CRISP development environment bootstrap.
"""

__version__ = "1.0.0"
