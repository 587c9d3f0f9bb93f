"""
meet-link: cached per-user Google Meet links with opaque direct-link aliases.
"""

__version__ = "0.1.0"
