"""
CHAPCHAP - CV and cover-letter document rendering

Turns CV and cover-letter drafts into paginated, print-ready PDFs.

Architecture:
- Drafting Context: Document model, validation, immutable draft updates
- Templating Context: Declarative template definitions and section building
- Rendering Context: Measurement, pagination and PDF backends
"""

__version__ = "0.1.0"
