"""Landed price calculation and the price service."""

from src.pricing.calculator import (
    GOLD,
    METALS,
    SILVER,
    LandedPrice,
    Metal,
    calculate_item_price,
    calculate_landed_price,
    get_metal,
    landed_price_from_inr_ounce,
    purity_price,
)
from src.pricing.international import (
    COUNTRIES,
    Country,
    GoldSilverRatio,
    InternationalPrice,
    calculate_gold_silver_ratio,
    calculate_international_price,
    get_country,
)
from src.pricing.price_service import MetalPriceService, PriceSnapshot

__all__ = [
    "Metal",
    "SILVER",
    "GOLD",
    "METALS",
    "LandedPrice",
    "get_metal",
    "calculate_landed_price",
    "landed_price_from_inr_ounce",
    "calculate_item_price",
    "purity_price",
    "Country",
    "COUNTRIES",
    "get_country",
    "InternationalPrice",
    "calculate_international_price",
    "GoldSilverRatio",
    "calculate_gold_silver_ratio",
    "MetalPriceService",
    "PriceSnapshot",
]
