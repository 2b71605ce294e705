"""Tests for alias_delegation.transport.envelope — EIP-712 envelopes."""
from __future__ import annotations

from typing import Any

import pytest
from eth_account import Account
from eth_account.messages import encode_typed_data

from alias_delegation.config import DelegationSettings
from alias_delegation.errors import TransportFailure
from alias_delegation.transport.envelope import (
    EnvelopeMutationClient,
    build_typed_data,
    sign_typed_data,
)

_NOW = 1_700_000_000


class _Outbox:
    def __init__(self, error: Exception | None = None) -> None:
        self.sent: list[dict[str, Any]] = []
        self.error = error

    async def __call__(self, envelope: dict[str, Any]) -> dict[str, Any]:
        if self.error is not None:
            raise self.error
        self.sent.append(envelope)
        return {"id": "receipt-1"}


def _recover(envelope: dict[str, Any]) -> str:
    data = envelope["data"]
    primary_type = next(iter(data["types"]))
    full_message = {
        "types": {
            "EIP712Domain": [
                {"name": "name", "type": "string"},
                {"name": "version", "type": "string"},
            ],
            **data["types"],
        },
        "primaryType": primary_type,
        "domain": data["domain"],
        "message": data["message"],
    }
    return Account.recover_message(
        encode_typed_data(full_message=full_message), signature=envelope["sig"]
    )


# ===========================================================================
# build_typed_data
# ===========================================================================


class TestBuildTypedData:
    def test_follow_message(self) -> None:
        owner = Account.create().address
        typed = build_typed_data(
            "follow",
            {"from": owner, "space": "space-1"},
            domain="snapshot",
            version="0.1.4",
            timestamp=_NOW,
        )
        assert typed["primaryType"] == "Follow"
        assert typed["domain"] == {"name": "snapshot", "version": "0.1.4"}
        assert typed["message"] == {"from": owner, "space": "space-1", "timestamp": _NOW}

    def test_alias_message(self) -> None:
        owner, alias = Account.create().address, Account.create().address
        typed = build_typed_data(
            "alias", {"from": owner, "alias": alias}, domain="d", version="1", timestamp=_NOW
        )
        assert typed["primaryType"] == "Alias"
        assert typed["message"]["alias"] == alias

    def test_unknown_action_rejected(self) -> None:
        with pytest.raises(ValueError):
            build_typed_data("vote", {}, domain="d", version="1", timestamp=_NOW)

    def test_missing_field_rejected(self) -> None:
        with pytest.raises(ValueError, match="space"):
            build_typed_data(
                "unfollow", {"from": Account.create().address}, domain="d", version="1", timestamp=_NOW
            )


# ===========================================================================
# Signing
# ===========================================================================


class TestSignTypedData:
    def test_signature_recovers_signer(self) -> None:
        signer = Account.create()
        typed = build_typed_data(
            "follow",
            {"from": signer.address, "space": "space-1"},
            domain="snapshot",
            version="0.1.4",
            timestamp=_NOW,
        )
        signature = sign_typed_data(signer, typed)
        recovered = Account.recover_message(encode_typed_data(full_message=typed), signature=signature)
        assert recovered == signer.address


# ===========================================================================
# EnvelopeMutationClient
# ===========================================================================


class TestEnvelopeMutationClient:
    @pytest.mark.asyncio
    async def test_submit_sends_signed_envelope(self) -> None:
        outbox = _Outbox()
        client = EnvelopeMutationClient(outbox, clock=lambda: _NOW + 0.9)
        alias = Account.create()
        owner = Account.create().address

        ack = await client.submit(alias, "follow", {"from": owner, "space": "space-1"})

        assert ack == {"id": "receipt-1"}
        [envelope] = outbox.sent
        assert envelope["address"] == alias.address
        assert "EIP712Domain" not in envelope["data"]["types"]
        assert envelope["data"]["message"]["timestamp"] == _NOW
        assert _recover(envelope) == alias.address

    @pytest.mark.asyncio
    async def test_send_error_wrapped_as_transport_failure(self) -> None:
        client = EnvelopeMutationClient(_Outbox(error=ConnectionError("refused")))
        alias = Account.create()
        with pytest.raises(TransportFailure) as exc_info:
            await client.submit(alias, "follow", {"from": alias.address, "space": "s"})
        assert isinstance(exc_info.value.__cause__, ConnectionError)

    @pytest.mark.asyncio
    async def test_transport_failure_passes_through(self) -> None:
        original = TransportFailure("hub said no")
        client = EnvelopeMutationClient(_Outbox(error=original))
        alias = Account.create()
        with pytest.raises(TransportFailure) as exc_info:
            await client.submit(alias, "unfollow", {"from": alias.address, "space": "s"})
        assert exc_info.value is original

    @pytest.mark.asyncio
    async def test_unknown_action_not_sent(self) -> None:
        outbox = _Outbox()
        client = EnvelopeMutationClient(outbox)
        with pytest.raises(ValueError):
            await client.submit(Account.create(), "vote", {})
        assert outbox.sent == []

    def test_from_settings_uses_domain(self) -> None:
        settings = DelegationSettings(envelope_domain="hub", envelope_version="2")
        client = EnvelopeMutationClient.from_settings(_Outbox(), settings)
        signer = Account.create()
        envelope = client.build_envelope(signer, "follow", {"from": signer.address, "space": "s"})
        assert envelope["data"]["domain"] == {"name": "hub", "version": "2"}
