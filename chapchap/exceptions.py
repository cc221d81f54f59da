"""Root of the CHAPCHAP error taxonomy.

Each context defines its own errors in contexts/{context}/exceptions.py; they
all derive from DocumentGenerationError so callers that only need to know
"the document could not be produced" can catch a single class.
"""


class DocumentGenerationError(Exception):
    """Base class for every error that aborts document generation."""

    # Short machine-readable kind, logged but never shown to end users
    kind = "generation_error"
