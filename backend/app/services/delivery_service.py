from decimal import Decimal
from typing import Dict, List

from pydantic import BaseModel

from app.config import settings
from app.utils.i18n import Locale


class UnknownRegionError(Exception):
    pass


class DeliveryRegion(BaseModel):
    key: str
    names: Dict[Locale, str]
    fee: Decimal

    def display_name(self, locale: Locale) -> str:
        return self.names.get(locale) or self.names.get(locale.other) or self.key

    def view(self, locale: Locale) -> dict:
        return {"key": self.key, "name": self.display_name(locale), "fee": self.fee}


DELIVERY_REGIONS: Dict[str, DeliveryRegion] = {
    r.key: r
    for r in [
        DeliveryRegion(
            key="wb",
            names={Locale.EN: "West Bank", Locale.AR: "الضفة الغربية"},
            fee=Decimal("20"),
        ),
        DeliveryRegion(
            key="jerusalem",
            names={Locale.EN: "Jerusalem", Locale.AR: "القدس"},
            fee=Decimal("30"),
        ),
        DeliveryRegion(
            key="interior",
            names={Locale.EN: "48 Areas", Locale.AR: "الداخل المحتل"},
            fee=Decimal("70"),
        ),
    ]
}


def get_region(key: str = None) -> DeliveryRegion:
    key = key or settings.DEFAULT_REGION
    region = DELIVERY_REGIONS.get(key)
    if region is None:
        raise UnknownRegionError(f"Unknown delivery region: {key}")
    return region


def list_regions() -> List[DeliveryRegion]:
    return list(DELIVERY_REGIONS.values())
