"""Command line tooling for the clinic records dashboard."""
