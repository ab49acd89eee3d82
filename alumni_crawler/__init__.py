"""
Stanford alumni directory crawler.
"""

__version__ = '0.1.0'
