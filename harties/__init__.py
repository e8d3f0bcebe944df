"""
Harties Local - seeding, scraping and access tooling for the local news and business directory
"""

__version__ = "1.0.0"
