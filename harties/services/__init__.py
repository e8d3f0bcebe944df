"""
Seeding, scraping and reset services used by the CLI
"""
