"""Gulf country prices and the gold/silver ratio.

Local price per gram in a Gulf market:

    spot (USD/oz) × USD/local / 31.1035
        × (1 + import duty) × (1 + VAT) × (1 + local premium)

Every configured currency is pegged to the US dollar, so the local rate comes
from constants and only USD/INR (for the Indian comparison) is fetched.

The gold/silver ratio is gold over silver, both in USD per troy ounce. A high
ratio means silver is cheap relative to gold.
"""

from dataclasses import asdict, dataclass
from datetime import datetime
from typing import Any

from src.pricing.calculator import OZ_TO_GRAM, SILVER, TOLA_TO_GRAM, Metal, landed_price_per_gram
from src.shared.utils import is_valid_price, iso_timestamp, now_utc, round2


@dataclass(frozen=True)
class Country:
    """Immutable duty and tax profile of one local market."""

    key: str
    name: str
    code: str  # ISO 3166 alpha-2
    currency: str
    import_duty: float
    vat: float
    local_premium: float


COUNTRIES: dict[str, Country] = {
    c.key: c
    for c in (
        Country("qatar", "Qatar", "QA", "QAR", import_duty=0.05, vat=0.0, local_premium=0.02),
        Country("uae", "UAE (Dubai)", "AE", "AED", import_duty=0.05, vat=0.05, local_premium=0.02),
        Country("saudiarabia", "Saudi Arabia", "SA", "SAR", import_duty=0.05, vat=0.15, local_premium=0.02),
        Country("kuwait", "Kuwait", "KW", "KWD", import_duty=0.05, vat=0.0, local_premium=0.02),
    )
}


def get_country(key: str) -> Country:
    """Look up a country by key.

    Raises:
        ValueError: If the country is not configured.
    """
    try:
        return COUNTRIES[key.lower()]
    except KeyError:
        raise ValueError(f"Unknown country '{key}'. Choose from: {', '.join(COUNTRIES)}") from None


@dataclass(frozen=True)
class InternationalPrice:
    """Local price in one country with its Indian landed equivalent."""

    metal: str
    country: str
    country_code: str
    currency: str
    price_per_gram: float
    price_per_10_gram: float
    price_per_kg: float
    price_per_tola: float
    price_per_oz: float
    usd_rate: float
    spot_usd_oz: float
    usd_inr_rate: float
    price_per_gram_inr: float
    price_per_kg_inr: float
    timestamp: str
    source: str = "calculated"

    def to_dict(self) -> dict[str, Any]:
        return asdict(self)


def international_price_per_gram(spot_usd_oz: float, usd_local: float, country: Country) -> float:
    """Unrounded local currency per gram, duty, VAT and premium included.

    Raises:
        ValueError: If either input is not a positive number.
    """
    if not is_valid_price(spot_usd_oz):
        raise ValueError(f"spot_usd_oz must be positive, got {spot_usd_oz!r}")
    if not is_valid_price(usd_local):
        raise ValueError(f"usd_local must be positive, got {usd_local!r}")

    base = spot_usd_oz * usd_local / OZ_TO_GRAM
    return base * (1 + country.import_duty) * (1 + country.vat) * (1 + country.local_premium)


def calculate_international_price(
    spot_usd_oz: float,
    usd_local: float,
    usd_inr: float,
    country: Country,
    metal: Metal = SILVER,
    now: datetime | None = None,
) -> InternationalPrice:
    """Local price for ``country`` plus the Indian landed price for comparison.

    Raises:
        ValueError: If any input is not a positive number.
    """
    per_gram = international_price_per_gram(spot_usd_oz, usd_local, country)
    inr_per_gram = landed_price_per_gram(spot_usd_oz, usd_inr)

    return InternationalPrice(
        metal=metal.name,
        country=country.name,
        country_code=country.code,
        currency=country.currency,
        price_per_gram=round2(per_gram),
        price_per_10_gram=round2(per_gram * 10),
        price_per_kg=round2(per_gram * 1000),
        price_per_tola=round2(per_gram * TOLA_TO_GRAM),
        price_per_oz=round2(spot_usd_oz * usd_local),
        usd_rate=round(usd_local, 4),
        spot_usd_oz=round2(spot_usd_oz),
        usd_inr_rate=round2(usd_inr),
        price_per_gram_inr=round2(inr_per_gram),
        price_per_kg_inr=float(round(inr_per_gram * 1000)),
        timestamp=iso_timestamp(now or now_utc()),
    )


# ---------------------------------------------------------------------------
# Gold/silver ratio
# ---------------------------------------------------------------------------

# Modern average sits around 65-70; 60-80 is the normal band
RATIO_EXTREMELY_UNDERVALUED = 90
RATIO_UNDERVALUED = 80
RATIO_OVERVALUED = 50


@dataclass(frozen=True)
class GoldSilverRatio:
    ratio: float
    gold_price_per_gram: float
    silver_price_per_gram: float
    gold_usd_oz: float
    silver_usd_oz: float
    usd_inr_rate: float
    interpretation: str  # silver_undervalued | silver_overvalued | normal
    interpretation_text: str
    timestamp: str

    def to_dict(self) -> dict[str, Any]:
        return asdict(self)


def interpret_ratio(ratio: float) -> tuple[str, str]:
    """Classify a gold/silver ratio.

    Returns:
        (interpretation, human readable text)
    """
    if ratio >= RATIO_EXTREMELY_UNDERVALUED:
        return "silver_undervalued", "Silver is significantly undervalued relative to gold"
    if ratio >= RATIO_UNDERVALUED:
        return "silver_undervalued", "Silver appears undervalued relative to gold"
    if ratio <= RATIO_OVERVALUED:
        return "silver_overvalued", "Silver appears overvalued relative to gold"
    return "normal", "Gold/silver ratio is in the normal range"


def calculate_gold_silver_ratio(
    gold_usd_oz: float,
    silver_usd_oz: float,
    usd_inr: float,
    now: datetime | None = None,
) -> GoldSilverRatio:
    """Ratio of gold to silver futures, with both landed INR prices.

    Raises:
        ValueError: If any input is not a positive number.
    """
    gold_per_gram = landed_price_per_gram(gold_usd_oz, usd_inr)
    silver_per_gram = landed_price_per_gram(silver_usd_oz, usd_inr)
    ratio = gold_usd_oz / silver_usd_oz
    interpretation, text = interpret_ratio(ratio)

    return GoldSilverRatio(
        ratio=round2(ratio),
        gold_price_per_gram=round2(gold_per_gram),
        silver_price_per_gram=round2(silver_per_gram),
        gold_usd_oz=round2(gold_usd_oz),
        silver_usd_oz=round2(silver_usd_oz),
        usd_inr_rate=round2(usd_inr),
        interpretation=interpretation,
        interpretation_text=text,
        timestamp=iso_timestamp(now or now_utc()),
    )
