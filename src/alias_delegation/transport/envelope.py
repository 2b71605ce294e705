"""EIP-712 signed envelopes for delegated actions.

Each action is serialized as EIP-712 typed data, signed by the given
signer, and wrapped as ``{"address", "sig", "data"}`` before being handed
to the outbound ``send`` callable. ``alias`` is signed by the owner's
primary identity; ``follow`` and ``unfollow`` by the alias identity.
"""
from __future__ import annotations

import logging
import time
from collections.abc import Awaitable, Mapping
from typing import Any, Callable

from eth_account.messages import encode_typed_data

from alias_delegation.config import DelegationSettings
from alias_delegation.errors import TransportFailure
from alias_delegation.transport.protocols import Signer

logger = logging.getLogger(__name__)

_DOMAIN_FIELDS = [
    {"name": "name", "type": "string"},
    {"name": "version", "type": "string"},
]

# action -> (primary type, ordered fields)
ACTION_TYPES: dict[str, tuple[str, list[dict[str, str]]]] = {
    "alias": (
        "Alias",
        [
            {"name": "from", "type": "address"},
            {"name": "alias", "type": "address"},
            {"name": "timestamp", "type": "uint64"},
        ],
    ),
    "follow": (
        "Follow",
        [
            {"name": "from", "type": "address"},
            {"name": "space", "type": "string"},
            {"name": "timestamp", "type": "uint64"},
        ],
    ),
    "unfollow": (
        "Unfollow",
        [
            {"name": "from", "type": "address"},
            {"name": "space", "type": "string"},
            {"name": "timestamp", "type": "uint64"},
        ],
    ),
}


def build_typed_data(
    action: str,
    payload: Mapping[str, Any],
    *,
    domain: str,
    version: str,
    timestamp: int,
) -> dict[str, Any]:
    """Build the full EIP-712 message for *action*.

    Raises
    ------
    ValueError
        If *action* is unknown or *payload* lacks one of its fields.
    """
    if action not in ACTION_TYPES:
        raise ValueError(f"Unknown delegated action {action!r}")
    primary_type, fields = ACTION_TYPES[action]

    message: dict[str, Any] = {}
    for field_def in fields:
        name = field_def["name"]
        if name == "timestamp":
            message[name] = timestamp
        elif name in payload:
            message[name] = payload[name]
        else:
            raise ValueError(f"Payload for {action!r} is missing field {name!r}")

    return {
        "types": {"EIP712Domain": _DOMAIN_FIELDS, primary_type: fields},
        "primaryType": primary_type,
        "domain": {"name": domain, "version": version},
        "message": message,
    }


def sign_typed_data(signer: Signer, typed_data: Mapping[str, Any]) -> str:
    """Sign *typed_data* and return the ``0x``-prefixed hex signature."""
    signable = encode_typed_data(full_message=dict(typed_data))
    signed = signer.sign_message(signable)
    return "0x" + bytes(signed.signature).hex()


class EnvelopeMutationClient:
    """Mutation collaborator that signs envelopes and forwards them to *send*.

    Parameters
    ----------
    send:
        Coroutine function delivering one envelope to the hub. Its return
        value is returned from :meth:`submit` as the acknowledgement.
    domain, version:
        EIP-712 domain fields.
    clock:
        Returns the current time in seconds; used for the ``timestamp``
        field.
    """

    def __init__(
        self,
        send: Callable[[dict[str, Any]], Awaitable[Any]],
        *,
        domain: str = "snapshot",
        version: str = "0.1.4",
        clock: Callable[[], float] = time.time,
    ) -> None:
        self._send = send
        self._domain = domain
        self._version = version
        self._clock = clock

    @classmethod
    def from_settings(
        cls,
        send: Callable[[dict[str, Any]], Awaitable[Any]],
        settings: DelegationSettings,
    ) -> "EnvelopeMutationClient":
        return cls(send, domain=settings.envelope_domain, version=settings.envelope_version)

    def build_envelope(
        self, signer: Signer, action: str, payload: Mapping[str, Any]
    ) -> dict[str, Any]:
        """Return the signed envelope for *action* without sending it."""
        typed_data = build_typed_data(
            action,
            payload,
            domain=self._domain,
            version=self._version,
            timestamp=int(self._clock()),
        )
        signature = sign_typed_data(signer, typed_data)
        types = {
            name: fields
            for name, fields in typed_data["types"].items()
            if name != "EIP712Domain"
        }
        return {
            "address": signer.address,
            "sig": signature,
            "data": {
                "domain": typed_data["domain"],
                "types": types,
                "message": typed_data["message"],
            },
        }

    async def submit(self, signer: Signer, action: str, payload: Mapping[str, Any]) -> Any:
        """Sign *action* with *signer* and send it.

        Raises
        ------
        ValueError
            For an unknown action or incomplete payload.
        TransportFailure
            If sending fails.
        """
        envelope = self.build_envelope(signer, action, payload)
        logger.debug("Submitting %s envelope signed by %s", action, signer.address)
        try:
            return await self._send(envelope)
        except TransportFailure:
            raise
        except Exception as exc:
            raise TransportFailure(f"Submitting {action!r} failed: {exc}") from exc
