from chainwatch.services.address import (
    addresses_equal,
    is_supported_chain,
    is_valid_address_for_chain,
    normalize_address,
    normalize_chain,
    short_address,
)
from chainwatch.services.chains import WalletAddress


def test_normalize_chain_defaults_to_ethereum():
    assert normalize_chain(None) == "ethereum"
    assert normalize_chain(" Ethereum ") == "ethereum"


def test_normalize_chain_aliases():
    assert normalize_chain("eth") == "ethereum"
    assert normalize_chain("SOL") == "solana"
    assert normalize_chain("matic") == "polygon"
    assert normalize_chain("arbitrum-one") == "arbitrum"


def test_supported_chain_flags():
    assert is_supported_chain("ethereum") is True
    assert is_supported_chain("solana") is True
    assert is_supported_chain("base") is True
    assert is_supported_chain("polygon") is True
    assert is_supported_chain("avalanche") is False


def test_address_validation_evm():
    address = "0x1234567890abcdef1234567890ABCDEF12345678"
    assert is_valid_address_for_chain(address, "ethereum") is True
    assert is_valid_address_for_chain(address[:-1], "ethereum") is False


def test_address_validation_solana():
    solana_address = "So11111111111111111111111111111111111111112"
    assert is_valid_address_for_chain(solana_address, "solana") is True
    assert is_valid_address_for_chain("O0lNotBase58", "solana") is False


def test_evm_addresses_compare_case_insensitively():
    upper = "0xA0B86991C6218B36C1D19D4A2E9EB0CE3606EB48"
    lower = upper.lower()
    assert normalize_address(upper, "ethereum") == lower
    assert addresses_equal(upper, lower, "ethereum") is True


def test_solana_addresses_compare_exactly():
    address = "JUP6LkbZbjS1jKKwapdHNy74zcZ3tLUZoi5QNyVTaV4"
    assert normalize_address(address, "solana") == address
    assert addresses_equal(address, address.lower(), "solana") is False


def test_wallet_address_equality_follows_chain_rules():
    evm = WalletAddress(chain="ethereum", address="0xABCDEF1234567890ABCDEF1234567890ABCDEF12")
    assert evm == WalletAddress(chain="ethereum", address=evm.address.lower())
    assert len({evm, WalletAddress(chain="ethereum", address=evm.address.lower())}) == 1

    parsed = WalletAddress.parse({"address": "abc", "chain": "SOL"})
    assert parsed.chain == "solana"


def test_short_address():
    assert short_address("0x1234567890abcdef") == "0x123456..."
    assert short_address(None) == "unknown"
