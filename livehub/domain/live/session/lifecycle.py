"""Translate ingest-server lifecycle callbacks into registry and automation updates.

Order of operations for a publish start (stop is symmetric):
1. Derive the stream key from the stream path; empty keys are discarded.
2. Under the notifier's critical section, add the key to the registry and,
   if the set changed, publish the new snapshot.
3. Trigger the automation controller, whether or not the set changed.

Connect-level callbacks never touch the registry: a transport connection does
not imply an active publish.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any

from loguru import logger

from livehub.domain.live.automation.controller import AutomationController

from .notifier import ChangeNotifier
from .session_registry import SessionRegistry

PATH_SEPARATOR = "/"


def derive_stream_key(stream_path: str | None) -> str:
    """Return the segment after the last separator (`/live/alpha` -> `alpha`).

    Returns an empty string for missing paths or paths ending in a separator.
    """
    if not stream_path:
        return ""
    return stream_path.rsplit(PATH_SEPARATOR, 1)[-1].strip()


@dataclass(frozen=True)
class LifecycleResult:
    event: str
    stream_key: str | None = None
    accepted: bool = True
    changed: bool = False


class LifecycleEventAdapter:
    """Single entry point for ingest lifecycle events."""

    def __init__(
        self,
        registry: SessionRegistry,
        notifier: ChangeNotifier,
        controller: AutomationController,
    ) -> None:
        self._registry = registry
        self._notifier = notifier
        self._controller = controller

    # Connection-level events: observational only

    def pre_connect(self, session_id: str, args: dict[str, Any] | None = None) -> LifecycleResult:
        logger.info(f"[NodeEvent on preConnect] id={session_id} args={args or {}}")
        return LifecycleResult(event="preConnect")

    def post_connect(self, session_id: str, args: dict[str, Any] | None = None) -> LifecycleResult:
        logger.info(f"[NodeEvent on postConnect] id={session_id} args={args or {}}")
        return LifecycleResult(event="postConnect")

    def done_connect(self, session_id: str, args: dict[str, Any] | None = None) -> LifecycleResult:
        logger.info(f"[NodeEvent on doneConnect] id={session_id} args={args or {}}")
        return LifecycleResult(event="doneConnect")

    def pre_publish(
        self,
        session_id: str,
        stream_path: str | None,
        args: dict[str, Any] | None = None,
    ) -> LifecycleResult:
        # Publish authorization would hook in here
        logger.info(
            f"[NodeEvent on prePublish] id={session_id} StreamPath={stream_path} args={args or {}}"
        )
        return LifecycleResult(event="prePublish", stream_key=derive_stream_key(stream_path) or None)

    # Publish-level events: drive the registry and automation

    def post_publish(
        self,
        session_id: str,
        stream_path: str | None,
        args: dict[str, Any] | None = None,
    ) -> LifecycleResult:
        logger.info(
            f"[NodeEvent on postPublish] id={session_id} StreamPath={stream_path} args={args or {}}"
        )
        key = derive_stream_key(stream_path)
        if not key:
            logger.warning(f"Discarding postPublish with no stream key: id={session_id} path={stream_path!r}")
            return LifecycleResult(event="postPublish", accepted=False)

        with self._notifier.critical_section():
            changed = self._registry.add(key)
            if changed:
                self._notifier.publish(self._registry.snapshot())

        if changed:
            logger.info(f"✅ Stream started: {stream_path}")
            logger.info(f"📺 View in OBS using: rtmp://localhost{stream_path}")
        else:
            logger.info(f"Stream {key} already live, registry unchanged")

        self._controller.on_stream_start(key)
        return LifecycleResult(event="postPublish", stream_key=key, changed=changed)

    def done_publish(
        self,
        session_id: str,
        stream_path: str | None,
        args: dict[str, Any] | None = None,
    ) -> LifecycleResult:
        logger.info(
            f"[NodeEvent on donePublish] id={session_id} StreamPath={stream_path} args={args or {}}"
        )
        key = derive_stream_key(stream_path)
        if not key:
            logger.warning(f"Discarding donePublish with no stream key: id={session_id} path={stream_path!r}")
            return LifecycleResult(event="donePublish", accepted=False)

        with self._notifier.critical_section():
            changed = self._registry.remove(key)
            if changed:
                self._notifier.publish(self._registry.snapshot())

        if changed:
            logger.info(f"❌ Stream ended: {stream_path}")
        else:
            logger.info(f"Stream {key} was not live, registry unchanged")

        self._controller.on_stream_stop(key)
        return LifecycleResult(event="donePublish", stream_key=key, changed=changed)
