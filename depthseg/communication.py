"""Identifiable objects and the sender/client links that connect pipeline stages."""

from __future__ import annotations

import abc
import enum
import logging
import threading
from typing import Any, Dict, Union

logger = logging.getLogger(__name__)

_id_lock = threading.Lock()
_id_counter = 0


def _next_id() -> int:
    global _id_counter
    with _id_lock:
        _id_counter += 1
        return _id_counter


def current_id_counter() -> int:
    """Return the most recently assigned object id."""
    with _id_lock:
        return _id_counter


class Identifiable:
    """An object that receives a unique, increasing integer id on creation."""

    def __init__(self) -> None:
        super().__init__()
        # With several bases sharing this class, the id is assigned only once.
        if "_id" not in self.__dict__:
            self._id = _next_id()

    @property
    def id(self) -> int:
        """The unique id of this object."""
        return self._id

    def guess_class_name(self) -> str:
        """Return the name of the object's class."""
        return type(self).__name__


class SenderType(enum.Enum):
    """How a sender treats the data it passes on."""

    STORER = "STORER"  # keeps a copy of the data, at least for some time
    STREAMER = "STREAMER"  # streams data and therefore blocks execution
    UNDEFINED = "undefined"


class UndefinedSenderTypeError(RuntimeError):
    """Raised when a sender with an undefined type is asked to take clients."""


class AbstractClient(Identifiable, abc.ABC):
    """A receiver of objects sent by an :class:`AbstractSender`."""

    @abc.abstractmethod
    def on_new_object_received(self, obj: Any, sender_id: int) -> None:
        """Handle an object sent by the sender with id ``sender_id``."""


class AbstractSender(Identifiable):
    """Passes objects on to every subscribed client, in order of client id."""

    def __init__(self, sender_type: SenderType = SenderType.UNDEFINED) -> None:
        super().__init__()
        self._sender_type = SenderType(sender_type)
        self._clients: Dict[int, AbstractClient] = {}

    @property
    def sender_type(self) -> SenderType:
        return self._sender_type

    def type_name(self) -> str:
        """Return the sender type as text."""
        return self._sender_type.value

    def add_client(self, client: AbstractClient) -> None:
        """Subscribe ``client`` to the data this sender shares."""
        if self._sender_type is SenderType.UNDEFINED:
            raise UndefinedSenderTypeError(
                f"class {self.guess_class_name()} (id: {self.id}) has UNDEFINED "
                f"type; it must be one of "
                f"{', '.join(t.name for t in SenderType if t is not SenderType.UNDEFINED)}"
            )
        self._clients[client.id] = client
        logger.info(
            "connection: %s (id: %d, %s) -> %s (id: %d)",
            self.guess_class_name(),
            self.id,
            self.type_name(),
            client.guess_class_name(),
            client.id,
        )

    def remove_client(self, client: Union[AbstractClient, int]) -> None:
        """Unsubscribe a client, given either the client or its id."""
        client_id = client if isinstance(client, int) else client.id
        removed = self._clients.pop(client_id, None)
        if removed is None:
            logger.error("no such client to delete: %d", client_id)
            return
        logger.info(
            "disconnected: %s (id: %d) -x- %s (id: %d)",
            self.guess_class_name(),
            self.id,
            removed.guess_class_name(),
            removed.id,
        )

    def client_count(self) -> int:
        """Return the number of subscribed clients."""
        return len(self._clients)

    def share_data_with_all_clients(self, obj: Any, sender_id: int = -1) -> None:
        """Send ``obj`` to every client; a negative ``sender_id`` means this sender's id."""
        id_to_use = sender_id if sender_id >= 0 else self.id
        for client_id in sorted(self._clients):
            self._clients[client_id].on_new_object_received(obj, id_to_use)