"""
Utility functions and helpers.

Modules:
- logging: Logging configuration
- progress: rich progress bars and summary panels
"""
