# src/market_insight/services/asset_classifier.py
"""
Asset Classifier

Static, case-insensitive classification of a ticker-like string into
stock / crypto / etf / index, plus the symbol mappings each provider needs.
No network I/O.

Usage:
    detect_asset_type("btc")     # AssetType.CRYPTO
    detect_asset_type("^GSPC")   # AssetType.INDEX
    to_chart_symbol("eth")       # "ETH-USD"
    coingecko_id("MATIC")        # "matic-network"
"""

from typing import Dict, FrozenSet

from src.market_insight.schemas.quote import AssetType

CRYPTO_SYMBOLS: FrozenSet[str] = frozenset({
    "BTC", "ETH", "ADA", "SOL", "MATIC", "AVAX", "DOT",
    "LINK", "UNI", "AAVE", "DOGE", "XRP", "LTC", "BCH",
})

ETF_SYMBOLS: FrozenSet[str] = frozenset({
    "SPY", "QQQ", "VTI", "ARKK", "GLD", "TQQQ", "IWM", "EFA", "VEA",
})

COINGECKO_IDS: Dict[str, str] = {
    "BTC": "bitcoin",
    "ETH": "ethereum",
    "ADA": "cardano",
    "SOL": "solana",
    "MATIC": "matic-network",
    "AVAX": "avalanche-2",
    "DOT": "polkadot",
    "LINK": "chainlink",
    "UNI": "uniswap",
    "AAVE": "aave",
    "DOGE": "dogecoin",
    "XRP": "ripple",
    "LTC": "litecoin",
    "BCH": "bitcoin-cash",
}

# Names used to widen free-text news queries
COMPANY_NAMES: Dict[str, str] = {
    "AAPL": "Apple Inc",
    "MSFT": "Microsoft Corporation",
    "GOOGL": "Google Alphabet",
    "AMZN": "Amazon",
    "TSLA": "Tesla Inc",
    "META": "Meta Facebook",
    "NVDA": "Nvidia Corporation",
    "BTC": "Bitcoin",
    "ETH": "Ethereum",
}


def normalize_symbol(symbol: str) -> str:
    """Strip and uppercase. Raises ValueError for an empty symbol."""
    normalized = (symbol or "").strip().upper()
    if not normalized:
        raise ValueError("Stock symbol is required")
    return normalized


def detect_asset_type(symbol: str) -> AssetType:
    upper = (symbol or "").strip().upper()
    if upper in CRYPTO_SYMBOLS:
        return AssetType.CRYPTO
    if upper in ETF_SYMBOLS:
        return AssetType.ETF
    if upper.startswith("^"):
        return AssetType.INDEX
    return AssetType.STOCK


def to_chart_symbol(symbol: str) -> str:
    """Chart provider symbol: crypto trades against USD (BTC -> BTC-USD)."""
    upper = symbol.strip().upper()
    if detect_asset_type(upper) == AssetType.CRYPTO:
        return f"{upper}-USD"
    return upper


def coingecko_id(symbol: str) -> str:
    return COINGECKO_IDS.get(symbol.strip().upper(), symbol.strip().lower())


def company_name(symbol: str) -> str:
    return COMPANY_NAMES.get(symbol.strip().upper(), symbol.strip())
