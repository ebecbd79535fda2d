"""Integer arithmetic utilities for cents-based valuations.

All valuations, prices, amounts and balances use int (cents). No float.
Per-share prices are whole cents, truncated toward zero.
"""


def cents_to_display(cents: int) -> str:
    """Convert cents to display string: 6500 -> '$65.00', -1200 -> '-$12.00'."""
    if cents < 0:
        abs_cents = -cents
        return f"-${abs_cents // 100:,}.{abs_cents % 100:02d}"
    return f"${cents // 100:,}.{cents % 100:02d}"


def price_per_share(market_cap: int, total_shares: int) -> int:
    """Per-share price in cents: market_cap // total_shares."""
    if total_shares <= 0:
        raise ValueError(f"total_shares must be positive, got {total_shares}")
    return market_cap // total_shares


def bps_of(amount: int, bps: int) -> int:
    """Floor of amount * bps / 10000, rounded down."""
    if amount == 0 or bps == 0:
        return 0
    return (amount * bps) // 10000
