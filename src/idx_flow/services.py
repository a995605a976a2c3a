# services.py
# Background token services and the leader election that gates them.
#
# Several runtime contexts may share one token store; only the leader runs
# services that require leadership (auto-renew). The elector is injected,
# so any cross-process coordination backend can stand behind it.

import logging
import threading
from collections.abc import Callable, Iterable
from typing import Protocol

from idx_flow.errors import ConfigurationError

logger = logging.getLogger(__name__)

KNOWN_SERVICES = ("autoRenew", "syncStorage")


class TokenService(Protocol):
    def start(self) -> None: ...

    def stop(self) -> None: ...

    def is_started(self) -> bool: ...

    def can_start(self) -> bool: ...

    def requires_leadership(self) -> bool: ...


class LeaderElector(Protocol):
    @property
    def is_leader(self) -> bool: ...

    @property
    def has_leader(self) -> bool: ...

    def await_leadership(self, callback: Callable[[], None]) -> None: ...

    def die(self) -> None: ...


# ---------------------------------------------------------------------------
# In-process elector
# ---------------------------------------------------------------------------


class _Channel:
    def __init__(self) -> None:
        self.leader: "LocalLeaderElector | None" = None
        self.waiting: list["LocalLeaderElector"] = []


class LocalLeaderElector:
    """
    Leader election among electors sharing a channel name in one process.

    The first elector to await leadership leads; when it dies, leadership
    passes to the longest-waiting elector and its callback fires. A channel
    is dropped once it has neither a leader nor waiters.
    """

    _channels: dict[str, _Channel] = {}
    _lock = threading.Lock()

    def __init__(self, channel_name: str) -> None:
        self.channel_name = channel_name
        self._callback: Callable[[], None] | None = None

    @property
    def is_leader(self) -> bool:
        channel = self._channels.get(self.channel_name)
        return channel is not None and channel.leader is self

    @property
    def has_leader(self) -> bool:
        channel = self._channels.get(self.channel_name)
        return channel is not None and channel.leader is not None

    def await_leadership(self, callback: Callable[[], None]) -> None:
        with self._lock:
            self._callback = callback
            channel = self._channels.setdefault(self.channel_name, _Channel())
            if channel.leader is None:
                channel.leader = self
                elected = True
            else:
                channel.waiting.append(self)
                elected = False
        if elected:
            callback()

    def die(self) -> None:
        successor = None
        with self._lock:
            channel = self._channels.get(self.channel_name)
            if channel is None:
                return
            if self in channel.waiting:
                channel.waiting.remove(self)
            if channel.leader is self:
                channel.leader = None
                if channel.waiting:
                    successor = channel.waiting.pop(0)
                    channel.leader = successor
            if channel.leader is None and not channel.waiting:
                del self._channels[self.channel_name]
        if successor is not None and successor._callback is not None:
            logger.debug("Leadership of '%s' passed on", self.channel_name)
            successor._callback()


# ---------------------------------------------------------------------------
# Service manager
# ---------------------------------------------------------------------------


class ServiceManager:
    """Starts, stops, and looks up named token services."""

    def __init__(
        self,
        elector: LeaderElector,
        factories: dict[str, Callable[[], TokenService]],
        known_services: Iterable[str] = KNOWN_SERVICES,
    ) -> None:
        self._elector = elector
        self._factories = factories
        self._known_services = tuple(known_services)
        self._services: dict[str, TokenService] = {}
        self._started = False
        elector.await_leadership(self._on_leader)

    def _on_leader(self) -> None:
        if self._started:
            self._start_services()

    def is_leader(self) -> bool:
        return self._elector.is_leader

    def has_leader(self) -> bool:
        return self._elector.has_leader

    def start(self) -> None:
        if self._started:
            self.stop()
        self._start_services()
        self._started = True

    def stop(self) -> None:
        self._stop_services()
        self._started = False

    def get_service(self, name: str) -> TokenService | None:
        return self._services.get(name)

    def _stop_services(self) -> None:
        for service in self._services.values():
            service.stop()
        self._services = {}

    def _start_services(self) -> None:
        for name in self._known_services:
            service = self._services.get(name) or self._create_service(name)
            can_start = (
                service.can_start()
                and not service.is_started()
                and (self.is_leader() if service.requires_leadership() else True)
            )
            if can_start:
                service.start()
                self._services[name] = service
                logger.debug("Started service '%s'", name)

    def _create_service(self, name: str) -> TokenService:
        factory = self._factories.get(name)
        if factory is None:
            raise ConfigurationError(f"Unknown service {name}")
        return factory()
