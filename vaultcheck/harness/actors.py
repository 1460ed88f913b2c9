"""Actor registry — the simulated caller identities of a campaign.

Each actor owns an Ed25519 key pair; its address is derived from the
public key so that signature-based approvals (permit) can be verified
by the vault without access to the registry.
"""

from __future__ import annotations

import hashlib
import logging
from dataclasses import dataclass, field

from cryptography.hazmat.primitives.asymmetric.ed25519 import Ed25519PrivateKey
from cryptography.hazmat.primitives.serialization import Encoding, PublicFormat

from vaultcheck.harness.errors import CapacityError, NoActorsError, UnknownActorError

logger = logging.getLogger(__name__)

DEFAULT_MAX_ACTORS = 16


def address_from_public_key(public_key: bytes) -> str:
    """Derive a 20-byte hex address from a raw Ed25519 public key."""
    return "0x" + hashlib.sha256(public_key).digest()[-20:].hex()


@dataclass(frozen=True)
class Actor:
    """A simulated transaction sender."""

    label: str
    address: str
    public_key: bytes
    _private_key: Ed25519PrivateKey = field(repr=False, compare=False)

    @classmethod
    def derive(cls, label: str, index: int) -> Actor:
        """Deterministic key pair, so replayed traces see the same addresses."""
        seed = hashlib.sha256(f"vaultcheck-actor:{index}:{label}".encode()).digest()
        private_key = Ed25519PrivateKey.from_private_bytes(seed)
        public_key = private_key.public_key().public_bytes(Encoding.Raw, PublicFormat.Raw)
        return cls(
            label=label,
            address=address_from_public_key(public_key),
            public_key=public_key,
            _private_key=private_key,
        )

    def sign(self, message: bytes) -> bytes:
        return self._private_key.sign(message)


class ActorRegistry:
    """Fixed-capacity set of actors with one active at a time."""

    def __init__(self, max_actors: int = DEFAULT_MAX_ACTORS) -> None:
        self._max_actors = max_actors
        self._actors: dict[str, Actor] = {}
        self._active: str | None = None

    def __len__(self) -> int:
        return len(self._actors)

    def __contains__(self, address: object) -> bool:
        return address in self._actors

    @property
    def actors(self) -> tuple[str, ...]:
        """Registered addresses in registration order."""
        return tuple(self._actors)

    def new_actor(self, label: str | None = None) -> str:
        """Register a fresh actor and return its address.

        The first registered actor becomes active.
        """
        if len(self._actors) >= self._max_actors:
            raise CapacityError(
                f"actor registry is full ({self._max_actors} actors)"
            )
        index = len(self._actors)
        actor = Actor.derive(label or f"actor{index}", index)
        self._actors[actor.address] = actor
        if self._active is None:
            self._active = actor.address
        logger.debug("Registered %s as %s", actor.label, actor.address)
        return actor.address

    def active_actor(self) -> str:
        if self._active is None:
            raise NoActorsError("no actors registered")
        return self._active

    def select_actor(self, address: str) -> None:
        if address not in self._actors:
            raise UnknownActorError(f"unknown actor {address}")
        self._active = address

    def get(self, address: str) -> Actor:
        try:
            return self._actors[address]
        except KeyError:
            raise UnknownActorError(f"unknown actor {address}") from None

    def pick(self, index: int) -> str:
        """Map an arbitrary index onto a registered actor."""
        if not self._actors:
            raise NoActorsError("no actors registered")
        return self.actors[index % len(self._actors)]
