"""
FDA Calendar Scraper - Biotech catalyst calendar monitoring pipeline.

This package provides functionality to:
- Fetch the FDA catalyst calendar page
- Parse each event row into a validated catalyst record
- Filter catalysts by share price and event date
- Group catalysts by phase and date into a catalog
- Email the catalog as a daily report
"""

__version__ = "1.0.0"
