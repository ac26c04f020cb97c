from app.core.exceptions import ValidationError
from app.models.product import Product


def validate(product: Product, quantity: int) -> None:
    """
    Gate an order quantity before any discount math runs.

    Checks run in a fixed order (minimum, maximum, stock) so the reported
    error is deterministic when several constraints are violated at once.
    """
    min_qty = product.min_order_qty or 1
    if quantity < min_qty:
        raise ValidationError("below minimum order quantity")

    if product.max_order_qty is not None and quantity > product.max_order_qty:
        raise ValidationError("above maximum order quantity")

    if quantity > product.stock_quantity:
        raise ValidationError("insufficient stock")
