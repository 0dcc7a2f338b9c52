from .envelope import Source, ToolEnvelope
from .chain import ChainLog, GasQuote, SolanaBalance, SolanaTokenBalance, TokenBalance, TransactionRecord
from .portfolio import AssetBalance, PortfolioSummary, WalletFailure, WalletPortfolio

__all__ = [
    "Source",
    "ToolEnvelope",
    "TokenBalance",
    "SolanaBalance",
    "SolanaTokenBalance",
    "TransactionRecord",
    "GasQuote",
    "ChainLog",
    "AssetBalance",
    "WalletPortfolio",
    "WalletFailure",
    "PortfolioSummary",
]
