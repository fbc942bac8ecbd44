"""Command line interface for the Xapo auth adapter."""
