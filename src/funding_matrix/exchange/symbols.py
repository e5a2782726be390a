"""Venue symbol spelling <-> canonical ticker.

Canonical tickers are the bare base asset ("BTC", "PEPE"). Venue spellings
carry a quote suffix ("BTCUSDT") and sometimes a contract multiplier prefix
("1000PEPEUSDT" on CEXes, "kPEPE" on Hyperliquid). A multiplier contract is
quoted per N units of the base asset, so its mark price must be divided by
N before it is comparable with a 1x venue. The prefix is not reversible from
the canonical ticker alone; trade links are built from the venue spelling
carried on each rate.
"""

import re
from decimal import Decimal
from typing import NamedTuple

QUOTE_ASSET = "USDT"

# 1000PEPE, 10000LADYS, 1000000MOG. Requires a letter after the digits so
# that tickers like "1INCH" are left alone.
_MULTIPLIER_PREFIX_RE = re.compile(r"^(1(?:0{3,}))(?=[A-Z])")
_KILO_PREFIX_RE = re.compile(r"^k(?=[A-Z])")
_KILO = 1000


class ParsedSymbol(NamedTuple):
    symbol: str  # canonical ticker
    multiplier: int  # base units per contract, 1 for plain tickers


def split_multiplier_prefix(base: str) -> ParsedSymbol:
    """1000PEPE -> (PEPE, 1000); BTC -> (BTC, 1)."""
    match = _MULTIPLIER_PREFIX_RE.match(base)
    if match is None:
        return ParsedSymbol(base, 1)
    return ParsedSymbol(base[match.end() :], int(match.group(1)))


def strip_multiplier_prefix(base: str) -> str:
    """Remove a leading numeric multiplier prefix (1000PEPE -> PEPE)."""
    return split_multiplier_prefix(base).symbol


def parse_usdt_symbol(venue_symbol: str) -> ParsedSymbol | None:
    """Ticker and multiplier for a USDT-margined CEX spelling, or None if not USDT."""
    symbol = venue_symbol.strip().upper()
    if not symbol.endswith(QUOTE_ASSET):
        return None
    parsed = split_multiplier_prefix(symbol[: -len(QUOTE_ASSET)])
    return parsed if parsed.symbol else None


def normalize_usdt_symbol(venue_symbol: str) -> str | None:
    """Canonical ticker for a USDT-margined CEX spelling, or None if not USDT.

    BTCUSDT -> BTC, 1000PEPEUSDT -> PEPE, BTCUSDC -> None.
    """
    parsed = parse_usdt_symbol(venue_symbol)
    return parsed.symbol if parsed is not None else None


def parse_hyperliquid_symbol(coin: str) -> ParsedSymbol | None:
    """Ticker and multiplier for a Hyperliquid coin name (kPEPE -> (PEPE, 1000))."""
    name = coin.strip()
    multiplier = 1
    if _KILO_PREFIX_RE.match(name):
        name, multiplier = name[1:], _KILO
    name = name.upper().removesuffix("-PERP")
    return ParsedSymbol(name, multiplier) if name else None


def normalize_hyperliquid_symbol(coin: str) -> str | None:
    """Canonical ticker for a Hyperliquid coin name (kPEPE -> PEPE, BTC-PERP -> BTC)."""
    parsed = parse_hyperliquid_symbol(coin)
    return parsed.symbol if parsed is not None else None


def per_unit_price(price: Decimal | None, multiplier: int) -> Decimal | None:
    """Mark price of one base unit given a contract quoted per `multiplier` units."""
    if price is None or multiplier == 1:
        return price
    return price / Decimal(multiplier)


def to_usdt_symbol(symbol: str) -> str:
    """Venue spelling for a canonical ticker on a BTCUSDT-style venue.

    Already-suffixed input is returned unchanged. Multiplier listings are not
    recoverable here; prefer the venue_symbol captured at fetch time.
    """
    symbol = symbol.upper()
    return symbol if symbol.endswith(QUOTE_ASSET) else f"{symbol}{QUOTE_ASSET}"
