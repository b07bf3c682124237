"""
Tests for SIWE challenge messages
"""

import re

from zkpay.auth.siwe import (
    build_siwe_message,
    format_issued_at,
    generate_nonce,
    origin_to_domain,
)


def test_message_layout(signer_address):
    message = build_siwe_message(
        signer_address,
        "https://testapp.com",
        nonce="abc123def456",
        issued_at="2025-03-28T03:03:03.333Z",
    )

    assert message == (
        "testapp.com wants you to sign in with your Ethereum account:\n"
        "0xc375317f8403Cb633de95a0226210e3A1bAcb93a\n"
        "\n"
        "\n"
        "URI: https://testapp.com\n"
        "Version: 1\n"
        "Chain ID: 1\n"
        "Nonce: abc123def456\n"
        "Issued At: 2025-03-28T03:03:03.333Z"
    )


def test_custom_chain_id_and_version(signer_address):
    message = build_siwe_message(
        signer_address, "https://testapp.com", nonce="n0nce123", chain_id=56, version="2"
    )

    assert "\nVersion: 2\n" in message
    assert "\nChain ID: 56\n" in message


def test_domain_strips_scheme_only():
    assert origin_to_domain("https://testapp.com") == "testapp.com"
    assert origin_to_domain("http://localhost:3000") == "localhost:3000"
    assert origin_to_domain("testapp.com") == "testapp.com"


def test_generated_nonce_and_timestamp(signer_address):
    message = build_siwe_message(signer_address, "https://zkpay.cc")

    nonce = re.search(r"^Nonce: (.+)$", message, re.MULTILINE).group(1)
    issued_at = re.search(r"^Issued At: (.+)$", message, re.MULTILINE).group(1)
    assert re.fullmatch(r"[0-9a-f]{16}", nonce)
    assert re.fullmatch(r"\d{4}-\d{2}-\d{2}T\d{2}:\d{2}:\d{2}\.\d{3}Z", issued_at)


def test_nonces_differ():
    assert generate_nonce() != generate_nonce()


def test_format_issued_at(frozen_now):
    assert format_issued_at(frozen_now) == "2025-03-28T03:03:03.333Z"
    assert format_issued_at(frozen_now - 333) == "2025-03-28T03:03:03.000Z"
