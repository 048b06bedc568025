"""Indian landed price calculation for silver and gold.

Landed price (INR per gram) from an international futures quote:

    spot (USD/oz) × USD/INR / 31.1035
        × (1 + import duty 6%)      5% basic customs + 1% AIDC, Budget July 2024
        × (1 + IGST 3%)
        × (1 + local premium 3%)    MCX trades at a premium over COMEX

Keyed providers (MetalpriceAPI, GoldAPI) already quote INR per ounce, so
their prices are only converted to grams.
"""

from dataclasses import asdict, dataclass
from datetime import datetime
from typing import Any

from src.shared.utils import is_valid_price, iso_timestamp, now_utc, round2

OZ_TO_GRAM = 31.1035  # troy ounce
TOLA_TO_GRAM = 11.6638
SOVEREIGN_TO_GRAM = 8.0  # South Indian gold coin weight

IMPORT_DUTY = 0.06
IGST = 0.03
LOCAL_PREMIUM = 0.03
GST_RATE = 0.03

GOLD_PURITY = {
    "24K": 0.999,
    "22K": 0.916,
    "18K": 0.750,
    "14K": 0.585,
}


@dataclass(frozen=True)
class Metal:
    """Immutable descriptor for a tracked metal."""

    name: str
    yahoo_symbol: str  # futures contract on Yahoo Finance
    iso_code: str  # ISO 4217 metal code used by keyed providers


SILVER = Metal(name="silver", yahoo_symbol="SI=F", iso_code="XAG")
GOLD = Metal(name="gold", yahoo_symbol="GC=F", iso_code="XAU")

METALS: dict[str, Metal] = {m.name: m for m in (SILVER, GOLD)}


def get_metal(name: str) -> Metal:
    """Look up a metal by name.

    Raises:
        ValueError: If the metal is not tracked.
    """
    try:
        return METALS[name.lower()]
    except KeyError:
        raise ValueError(f"Unknown metal '{name}'. Choose from: {', '.join(METALS)}") from None


@dataclass(frozen=True)
class LandedPrice:
    """Local price of one metal, with the inputs it was derived from."""

    metal: str
    price_per_gram: float
    price_per_10_gram: float
    price_per_kg: float
    price_per_tola: float
    price_per_sovereign: float
    source: str
    timestamp: str
    currency: str = "INR"
    spot_usd_oz: float | None = None
    usd_inr_rate: float | None = None

    def to_dict(self) -> dict[str, Any]:
        return asdict(self)


def _landed(
    metal: Metal,
    per_gram: float,
    source: str,
    now: datetime | None,
    spot_usd_oz: float | None = None,
    usd_inr_rate: float | None = None,
) -> LandedPrice:
    return LandedPrice(
        metal=metal.name,
        price_per_gram=round2(per_gram),
        price_per_10_gram=round2(per_gram * 10),
        price_per_kg=float(round(per_gram * 1000)),
        price_per_tola=round2(per_gram * TOLA_TO_GRAM),
        price_per_sovereign=round2(per_gram * SOVEREIGN_TO_GRAM),
        source=source,
        timestamp=iso_timestamp(now or now_utc()),
        spot_usd_oz=round2(spot_usd_oz) if spot_usd_oz is not None else None,
        usd_inr_rate=round2(usd_inr_rate) if usd_inr_rate is not None else None,
    )


def landed_price_per_gram(spot_usd_oz: float, usd_inr: float) -> float:
    """Unrounded landed INR per gram.

    Raises:
        ValueError: If either input is not a positive number.
    """
    if not is_valid_price(spot_usd_oz):
        raise ValueError(f"spot_usd_oz must be positive, got {spot_usd_oz!r}")
    if not is_valid_price(usd_inr):
        raise ValueError(f"usd_inr must be positive, got {usd_inr!r}")

    base = spot_usd_oz * usd_inr / OZ_TO_GRAM
    return base * (1 + IMPORT_DUTY) * (1 + IGST) * (1 + LOCAL_PREMIUM)


def calculate_landed_price(
    spot_usd_oz: float,
    usd_inr: float,
    metal: Metal = SILVER,
    source: str = "calculated",
    now: datetime | None = None,
) -> LandedPrice:
    """Landed price from a USD futures quote and a USD/INR rate.

    Raises:
        ValueError: If either input is not a positive number.
    """
    per_gram = landed_price_per_gram(spot_usd_oz, usd_inr)
    return _landed(metal, per_gram, source, now, spot_usd_oz=spot_usd_oz, usd_inr_rate=usd_inr)


def landed_price_from_inr_ounce(
    inr_per_oz: float,
    metal: Metal = SILVER,
    source: str = "provider",
    now: datetime | None = None,
) -> LandedPrice:
    """Landed price from a provider quote already in INR per troy ounce.

    Raises:
        ValueError: If the quote is not a positive number.
    """
    if not is_valid_price(inr_per_oz):
        raise ValueError(f"inr_per_oz must be positive, got {inr_per_oz!r}")
    return _landed(metal, inr_per_oz / OZ_TO_GRAM, source, now)


def purity_price(price_24k: float, karat: str) -> float:
    """Gold price per gram for a karat, derived from the 24K price.

    Raises:
        ValueError: If the karat is unknown.
    """
    if karat not in GOLD_PURITY:
        raise ValueError(f"Unknown purity '{karat}'. Choose from: {', '.join(GOLD_PURITY)}")
    return round2(price_24k / GOLD_PURITY["24K"] * GOLD_PURITY[karat])


def calculate_item_price(
    weight_grams: float,
    purity: float,
    price_per_gram: float,
    making_charges_percent: float = 0.0,
    include_gst: bool = True,
) -> dict[str, float]:
    """Price of a jewellery item or coin.

    Args:
        weight_grams: Item weight.
        purity: Fineness in parts per thousand (999, 925, 916, ...).
        price_per_gram: Pure metal price per gram.
        making_charges_percent: Making charges as a percentage of metal value.
        include_gst: Add 3% GST on metal value plus making charges.

    Returns:
        {"metal_value", "making_charges", "gst", "total"}, each rounded to 2 dp.

    Raises:
        ValueError: If weight, purity or price is out of range.
    """
    if weight_grams < 0:
        raise ValueError("weight_grams cannot be negative")
    if not 0 < purity <= 1000:
        raise ValueError(f"purity must be in (0, 1000], got {purity}")
    if price_per_gram < 0 or making_charges_percent < 0:
        raise ValueError("price_per_gram and making_charges_percent cannot be negative")

    metal_value = weight_grams * price_per_gram * (purity / 1000)
    making_charges = metal_value * making_charges_percent / 100
    subtotal = metal_value + making_charges
    gst = subtotal * GST_RATE if include_gst else 0.0

    return {
        "metal_value": round2(metal_value),
        "making_charges": round2(making_charges),
        "gst": round2(gst),
        "total": round2(subtotal + gst),
    }
