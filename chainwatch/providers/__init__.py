"""Chain and price data providers."""
