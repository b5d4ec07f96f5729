# =============================================================================
# src/cli/__init__.py - CLI Module Overview
# =============================================================================
#
# Standalone command-line tools for the resolver, runnable via
# `python -m src.cli.<module>`:
#
#   resolve.py - resolve one track reference using the same wiring,
#                cache database and credentials as the API server.
#
# CLI modules use argparse and defer heavy imports into functions so that
# --quiet can reconfigure logging before anything logs.
# =============================================================================

"""CLI tools for the smart-link resolver.

- ``python -m src.cli.resolve`` - resolve a track reference.
"""
