"""File-backed auth providers."""

from .jsonl_audit import JsonLinesAuditProvider

__all__ = ["JsonLinesAuditProvider"]
