from enum import Enum


class DiscountType(str, Enum):
    percentage = "percentage"
    fixed = "fixed"


class PromotionType(str, Enum):
    percentage_discount = "PERCENTAGE_DISCOUNT"
    fixed_amount_discount = "FIXED_AMOUNT_DISCOUNT"

    @property
    def discount_type(self) -> DiscountType:
        if self is PromotionType.percentage_discount:
            return DiscountType.percentage
        return DiscountType.fixed


class DiscountSource(str, Enum):
    volume_tier = "volume_tier"
    promotion = "promotion"
