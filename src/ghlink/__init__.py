"""
ghlink

Mint short, shareable URLs backed by a GitHub repository: redirect links
to arbitrary URLs, or PDFs hosted in the repository itself.
"""

__version__ = "0.1.0"
__author__ = "ghlink contributors"
__description__ = "Short links stored in your own GitHub repository"
