"""Generate BibTeX citations from Cargo manifests."""

__version__ = "0.3.0"
