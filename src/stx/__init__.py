"""
stx — Syncthing helper CLI.

Pairs a local Syncthing node with a remote one and aggregates
status, errors, and events across every registered server.
"""

__version__ = "0.1.0"
__author__ = "stx contributors"
