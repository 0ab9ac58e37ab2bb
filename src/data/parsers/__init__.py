"""Parsers for upstream market data."""

from .lending_parser import LendingAccountParser
from .vault_parser import VaultParser

__all__ = ["LendingAccountParser", "VaultParser"]
