"""Reporting module - host-side reporters for browser events."""

from .event_bridge import BaseReporter, BridgeReporter, normalize_payload

__all__ = ["BaseReporter", "BridgeReporter", "normalize_payload"]
