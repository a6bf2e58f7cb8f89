"""Pipeline package (end-to-end redaction and detection)."""

from .redact import RedactionResult, detect_document_bytes, redact_document_bytes, redact_pages

__all__ = ["RedactionResult", "detect_document_bytes", "redact_document_bytes", "redact_pages"]
