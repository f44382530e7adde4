"""Delivery sinks: where finished export files go."""

from passdesk.infrastructure.delivery.sinks import DirectoryDeliverySink, MemoryDeliverySink

__all__ = ["DirectoryDeliverySink", "MemoryDeliverySink"]
