from config.settings import settings
from src.mx_common.errors import InvalidIdentifierError, InvalidPriceError, InvalidQuantityError


def check_order_limit(quantity: int) -> None:
    """Raise InvalidQuantityError(4001) if quantity is not in [1, MAX_ORDER_QUANTITY]."""
    if not (1 <= quantity <= settings.MAX_ORDER_QUANTITY):
        raise InvalidQuantityError(quantity, settings.MAX_ORDER_QUANTITY)


def check_team_id(team_id: int) -> None:
    if team_id <= 0:
        raise InvalidIdentifierError("team_id", team_id)


def check_quoted_price(price: int) -> None:
    if price <= 0:
        raise InvalidPriceError(price)
