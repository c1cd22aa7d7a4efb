"""Release Prepare - publish release artifacts and catalog metadata.

This package hashes and uploads release archives, records release metadata
in the release catalog document, and registers releases with the update API.
"""

__version__ = "0.1.0"
__all__ = ["__version__"]
