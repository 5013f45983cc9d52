# courier_tracker/core/tracking/registry.py
"""
Channel membership and fan-out.

Channels:
- delivery-{courier_id} -- one per courier, created on first join
- admin                 -- shared by every dashboard connection

All operations are synchronous: membership changes and publish never
suspend, so no handler observes a half-applied change.
"""

from __future__ import annotations

from typing import Any, Hashable, Protocol

from courier_tracker.common.logger import get_logger

logger = get_logger("tracking.registry")


class Subscriber(Protocol):
    """A live connection as seen by the registry."""

    @property
    def id(self) -> Hashable:
        ...

    def deliver(self, message: dict[str, Any]) -> bool:
        """Queues a message without waiting; False if it was dropped."""
        ...


class SubscriptionRegistry:
    """
    Tracks which connection belongs to which channel.

    A connection holds at most one courier channel plus, optionally, the
    admin channel.
    """

    def __init__(
        self,
        admin_channel: str = "admin",
        courier_channel_prefix: str = "delivery-",
    ) -> None:
        self.admin_channel = admin_channel
        self.courier_channel_prefix = courier_channel_prefix

        # channel -> members
        self._channels: dict[str, set[Subscriber]] = {}
        # member -> channels
        self._memberships: dict[Subscriber, set[str]] = {}

        self._total_published = 0
        self._total_delivered = 0
        self._total_dropped = 0

    def courier_channel(self, courier_id: str) -> str:
        """Channel key for one courier."""
        return f"{self.courier_channel_prefix}{courier_id}"

    def is_courier_channel(self, channel: str) -> bool:
        return channel != self.admin_channel and channel.startswith(self.courier_channel_prefix)

    def join(self, connection: Subscriber, channel: str) -> None:
        """
        Adds the connection to a channel. Joining twice is a no-op.

        Joining a courier channel moves the connection out of the courier
        channel it was in before.
        """
        channels = self._memberships.setdefault(connection, set())
        if channel in channels:
            return

        if self.is_courier_channel(channel):
            for previous in [c for c in channels if self.is_courier_channel(c)]:
                self._remove(connection, previous)

        channels.add(channel)
        self._channels.setdefault(channel, set()).add(connection)
        logger.debug("Connection %s joined %s", connection.id, channel)

    def leave(self, connection: Subscriber) -> None:
        """Removes the connection from every channel. Safe for unknown connections."""
        channels = self._memberships.pop(connection, None)
        if not channels:
            return

        for channel in channels:
            members = self._channels.get(channel)
            if members is None:
                continue
            members.discard(connection)
            if not members:
                del self._channels[channel]
        logger.debug("Connection %s left %s", connection.id, sorted(channels))

    def _remove(self, connection: Subscriber, channel: str) -> None:
        self._memberships.get(connection, set()).discard(channel)
        members = self._channels.get(channel)
        if members is not None:
            members.discard(connection)
            if not members:
                del self._channels[channel]

    def publish(self, channel: str, message: dict[str, Any]) -> int:
        """
        Hands the message to every current member of the channel.

        Members that cannot take it (closed, or their queue is full) are
        skipped; publish itself never fails.

        Returns:
            Number of members that accepted the message
        """
        members = self._channels.get(channel)
        if not members:
            return 0

        self._total_published += 1
        delivered = 0
        # copy: a member may be removed while we iterate
        for member in list(members):
            if member.deliver(message):
                delivered += 1
            else:
                self._total_dropped += 1
                logger.warning("Dropped message on %s for lagging connection %s", channel, member.id)

        self._total_delivered += delivered
        return delivered

    def members(self, channel: str) -> set[Subscriber]:
        """Current members of a channel (copy)."""
        return set(self._channels.get(channel, ()))

    def channels_of(self, connection: Subscriber) -> set[str]:
        """Channels the connection belongs to (copy)."""
        return set(self._memberships.get(connection, ()))

    def get_stats(self) -> dict[str, Any]:
        return {
            "connections": len(self._memberships),
            "channels": len(self._channels),
            "admin_subscribers": len(self._channels.get(self.admin_channel, ())),
            "total_published": self._total_published,
            "total_delivered": self._total_delivered,
            "total_dropped": self._total_dropped,
        }
