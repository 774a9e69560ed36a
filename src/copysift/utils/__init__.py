"""
copysift Utilities Module
=========================

Utility functions shared by the CLI and the tool server.
"""

from copysift.utils.logging import setup_logging

__all__ = [
    "setup_logging",
]
