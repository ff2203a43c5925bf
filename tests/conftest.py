"""Shared fixtures: the reference key and connection id used by the vectors."""

from __future__ import annotations

import pytest

from signing.signer import LocalKeySigner

PRIVATE_KEY = "e908f86dbb4d55ac876378565aafeabc187f6690f046459397b17d9b9a19688e"
CONNECTION_ID = "0xde6c4037798a4434ca03cd05f00e3b803126221375cd1e7eaaaf041768be06eb"


@pytest.fixture
def signer() -> LocalKeySigner:
    return LocalKeySigner.from_hex(PRIVATE_KEY)


@pytest.fixture
def connection_id() -> bytes:
    return bytes.fromhex(CONNECTION_ID[2:])
