import logging

from chainwatch.config import Settings, get_settings
from chainwatch.logging_config import setup_logging
from chainwatch.services.chains import ChainFamily, build_chain_catalog


def test_solana_rpc_alias(monkeypatch):
    """Solana RPC URL should load from the short legacy name when present."""

    monkeypatch.delenv("SOLANA_RPC_URL", raising=False)
    monkeypatch.setenv("SOLANA_RPC", "https://solana.example/rpc")

    settings = Settings()

    assert settings.solana_rpc_url == "https://solana.example/rpc"


def test_solana_rpc_falls_back_to_helius(monkeypatch):
    """Older deployments configured Solana through HELIUS_RPC_URL."""

    monkeypatch.delenv("SOLANA_RPC_URL", raising=False)
    monkeypatch.delenv("SOLANA_RPC", raising=False)
    monkeypatch.setenv("HELIUS_RPC_URL", "https://helius.example/rpc")

    settings = Settings()

    assert settings.solana_rpc_url == "https://helius.example/rpc"


def test_cache_defaults(monkeypatch):
    monkeypatch.delenv("PRICE_CACHE_TTL_SECONDS", raising=False)
    monkeypatch.delenv("ELIGIBILITY_CACHE_TTL_SECONDS", raising=False)
    monkeypatch.delenv("EVENT_BUFFER_CAPACITY", raising=False)

    settings = Settings()

    assert settings.price_cache_ttl_seconds == 60
    assert settings.eligibility_cache_ttl_seconds == 300
    assert settings.event_buffer_capacity == 1000


def test_evm_rpc_urls_use_template_then_extras():
    settings = get_settings(
        {
            "alchemy_api_key": "demo",
            "evm_rpc_extra_urls": {"base": ["https://base.example/rpc"]},
        }
    )

    assert settings.resolve_evm_rpc_urls("base-mainnet", "base") == [
        "https://base-mainnet.g.alchemy.com/v2/demo",
        "https://base.example/rpc",
    ]


def test_chain_catalog_built_from_settings():
    settings = get_settings({"alchemy_api_key": "demo", "solana_rpc_url": "https://solana.example/rpc"})

    catalog = build_chain_catalog(settings)

    assert set(catalog.chains) == {"ethereum", "polygon", "arbitrum", "optimism", "base", "solana"}
    assert "base" in catalog
    assert "starknet" not in catalog
    assert catalog.get("polygon").native_symbol == "MATIC"
    assert catalog.get("solana").family is ChainFamily.SOLANA
    assert catalog.get("solana").rpc_urls == ("https://solana.example/rpc",)
    assert catalog.get("ethereum").rpc_urls[0] == "https://eth-mainnet.g.alchemy.com/v2/demo"


def test_setup_logging_installs_single_handler():
    root = logging.getLogger()
    saved_handlers, saved_level = root.handlers[:], root.level
    try:
        setup_logging("debug")
        setup_logging("debug")

        assert root.level == logging.DEBUG
        assert len(root.handlers) == 1
        assert logging.getLogger("httpx").level == logging.WARNING
    finally:
        root.handlers[:] = saved_handlers
        root.setLevel(saved_level)
