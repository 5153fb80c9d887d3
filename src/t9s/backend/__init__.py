"""Temporal backend collaborator: contract, failure taxonomy, HTTP implementation."""
