"""Fire-and-forget telemetry hooks for the REST layer.

The REST client reports one event per successful logical call and one
exception per failed call. Hooks must not influence the call: anything a hook
raises is logged and dropped.
"""
from __future__ import annotations
from typing import Any, Dict, Mapping, Optional, Protocol
import logging

logger = logging.getLogger(__name__)


class TelemetryHook(Protocol):
    def event(self, name: str, properties: Mapping[str, Any], metrics: Mapping[str, float]) -> None:
        ...

    def exception(self, error: BaseException, properties: Mapping[str, Any]) -> None:
        ...


class NullTelemetry:
    """Hook that discards everything."""

    def event(self, name: str, properties: Mapping[str, Any], metrics: Mapping[str, float]) -> None:
        pass

    def exception(self, error: BaseException, properties: Mapping[str, Any]) -> None:
        pass


def emit_event(hook: TelemetryHook, name: str, properties: Dict[str, Any], metrics: Optional[Dict[str, float]] = None) -> None:
    try:
        hook.event(name, properties, metrics or {})
    except Exception:
        logger.warning("Telemetry hook failed while recording event %s", name, exc_info=True)


def emit_exception(hook: TelemetryHook, error: BaseException, properties: Dict[str, Any]) -> None:
    try:
        hook.exception(error, properties)
    except Exception:
        logger.warning("Telemetry hook failed while recording %s", type(error).__name__, exc_info=True)
