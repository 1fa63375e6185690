from .ingest import IngestEvent, IngestEventOut, IngestEventType

__all__ = ["IngestEvent", "IngestEventOut", "IngestEventType"]
