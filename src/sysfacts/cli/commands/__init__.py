"""CLI commands for sysfacts.

This package contains the implementation of CLI commands:
    - collect: Run plugins and print facts
    - refresh: Re-run the plugins under a fact path
    - plugins: List loaded plugins
    - version: Show version information
"""
