"""
Workers module for command-line maintenance jobs.

This module contains:
- cleanup_cli: ``pickup-cleanup``, purges past exceptions and day notes
"""
