"""Weekly return calculator: pure functions over integer cents.

    account_value = wallet + portfolio
    gain          = end_account_value - start_account_value - deposits
    return        = gain / (start_account_value + deposits)   if start_account_value > 0
                  = 0                                          otherwise

Deposits are removed from the gain and added to the capital base, so topping
up a wallet is never scored as performance. The ratio is an exact Decimal;
only format_return_percent rounds.
"""

from decimal import ROUND_HALF_EVEN, Decimal

ZERO = Decimal(0)


def account_value(wallet: int, portfolio: int) -> int:
    return wallet + portfolio


def weekly_return(start_account_value: int, end_account_value: int, deposits: int) -> Decimal:
    if start_account_value <= 0:
        return ZERO
    gain = end_account_value - start_account_value - deposits
    base = start_account_value + deposits
    return Decimal(gain) / Decimal(base)


def format_return_percent(value: Decimal, places: int = 2) -> str:
    """Decimal(0.066666...) -> '+6.67%'; Decimal(-0.2083...) -> '-20.83%'."""
    quantum = Decimal(1).scaleb(-places)
    pct = (value * 100).quantize(quantum, rounding=ROUND_HALF_EVEN)
    if pct == 0:
        pct = abs(pct)
    sign = "+" if pct > 0 else ""
    return f"{sign}{pct}%"
