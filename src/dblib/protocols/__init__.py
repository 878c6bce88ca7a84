"""Protocols describing the seams between builders, connections and the manager."""

from dblib.protocols.builder import StatementBuilder
from dblib.protocols.connection import DatabaseConnection

__all__ = [
    "StatementBuilder",
    "DatabaseConnection",
]
