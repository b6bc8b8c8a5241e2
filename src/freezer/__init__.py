"""freezer - client for an encrypted, chunked file versioning server."""

__version__ = "0.1.0"
