"""Helpers shared by nodes."""
from .jsonapi import normalize_response, parse_body, simplify_entity

__all__ = ["normalize_response", "parse_body", "simplify_entity"]
