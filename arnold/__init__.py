"""Agent-first command-line client for GraphQL APIs."""

__version__ = "0.1.0"
