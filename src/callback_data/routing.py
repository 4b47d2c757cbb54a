"""Dispatch of raw payloads to the CallbackData that packed them.

Several callbacks usually share one transport field (e.g. every inline
button of a bot). A CallbackRouter holds them all and picks the right one
from the payload's identifier prefix.
"""

from __future__ import annotations

import logging
from typing import Any, Iterator

from .callback import CallbackData
from .exceptions import CallbackIdMismatch

logger = logging.getLogger(__name__)


class CallbackRouter:
    """Registry of callbacks keyed by identifier.

    Example:
        >>> router = CallbackRouter()
        >>> router.register(CallbackData("vote").number("poll_id"))
        >>> router.register(CallbackData("page").number("index"))
        >>> callback, values = router.unpack(payload)
        >>> if callback.name == "vote":
        ...     print(f"Vote on poll {values['poll_id']}")
    """

    def __init__(self) -> None:
        self._callbacks: list[CallbackData] = []
        # id or legacy_id -> callback
        self._by_id: dict[str, CallbackData] = {}

    def register(self, callback: CallbackData) -> None:
        """Register a callback for dispatch.

        Args:
            callback: Callback to register

        Raises:
            ValueError: If another callback already uses the same identifier
        """
        for identifier in (callback.id, callback.legacy_id):
            existing = self._by_id.get(identifier)
            if existing is not None and existing is not callback:
                raise ValueError(
                    f"Identifier {identifier!r} already registered to {existing.name!r}. "
                    f"Cannot register {callback.name!r} with the same identifier."
                )

        if callback in self:
            # Already registered, no-op
            return

        self._callbacks.append(callback)
        self._by_id[callback.id] = callback
        self._by_id[callback.legacy_id] = callback

    def resolve(self, payload: str) -> CallbackData | None:
        """Find the callback that packed a payload.

        Returns:
            The first registered callback whose filter accepts the payload,
            or None if there is none
        """
        for callback in self._callbacks:
            if callback.filter(payload):
                return callback

        logger.debug("No registered callback matches payload %r", payload)
        return None

    def unpack(self, payload: str) -> tuple[CallbackData, dict[str, Any]]:
        """Resolve and decode a payload.

        Returns:
            Tuple of (callback, decoded value map)

        Raises:
            CallbackIdMismatch: If no registered callback matches
            DecodeError: If the matching callback cannot decode the payload
        """
        callback = self.resolve(payload)
        if callback is None:
            names = sorted(item.name for item in self._callbacks)
            raise CallbackIdMismatch(
                f"No registered callback matches payload {payload!r}. "
                f"Registered: {names}. "
                f"Did you forget to call register()?"
            )

        return callback, callback.unpack(payload)

    def __contains__(self, callback: object) -> bool:
        return any(registered is callback for registered in self._callbacks)

    def __iter__(self) -> Iterator[CallbackData]:
        return iter(self._callbacks)

    def __len__(self) -> int:
        return len(self._callbacks)
