"""
Wait Operation Utilities
"""

from .progress import WaitProgressTracker

__all__ = ['WaitProgressTracker']
