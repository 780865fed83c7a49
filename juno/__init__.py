"""
Juno Outreach

A job lead outreach tool that:
- Imports a spreadsheet of job leads (CSV, semicolon or tab separated)
- Classifies each listing as entry-level or not
- Drafts a personalized application email for the qualifying ones
- Exports drafts for review in an email client

Drafts are prepared for review only; nothing is sent automatically.
"""

__version__ = "1.0.0"
