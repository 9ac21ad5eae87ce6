from enum import Enum


class PriceAdjustmentType(str, Enum):
    NONE = "none"
    FIXED = "fixed"
    PERCENTAGE = "percentage"


class BundlePricingType(str, Enum):
    CALCULATED = "calculated"
    FIXED = "fixed"
