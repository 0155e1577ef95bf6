"""
Core utilities and shared components for the Stablebook platform.

This package provides the exception hierarchy, the API exception handler and
cache key helpers used across the apps.
"""

__version__ = "1.0.0"
