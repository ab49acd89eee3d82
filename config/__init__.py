"""
Configuration package for the Alumni Directory Crawler.
"""

from config.settings import *

__all__ = ['settings']
