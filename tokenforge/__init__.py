"""
tokenforge — generate design-token artifacts and sync published releases.
"""

__version__ = "0.1.0"
