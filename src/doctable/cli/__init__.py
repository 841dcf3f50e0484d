"""Command line interface for doctable."""
