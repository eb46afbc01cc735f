from enum import Enum
from typing import Any, Optional


class Locale(str, Enum):
    AR = "ar"
    EN = "en"

    @classmethod
    def parse(cls, value: Optional[str], default: "Locale" = None) -> "Locale":
        """Map a raw locale string to a Locale, falling back to `default` (or Arabic)."""
        if value:
            try:
                return cls(value.lower())
            except ValueError:
                pass
        return default or cls.AR

    @property
    def other(self) -> "Locale":
        return Locale.EN if self is Locale.AR else Locale.AR


LABELS = {
    Locale.EN: {
        "currency": "₪",
        "whatsapp_intro": "Hi Bella Kids! I want to order:",
        "size": "Size",
        "color": "Style",
        "variant": "Code",
        "subtotal": "Subtotal",
        "delivery": "Delivery",
        "total": "Total",
    },
    Locale.AR: {
        "currency": "₪",
        "whatsapp_intro": "مرحباً بيلا كيدز! أود طلب ما يلي:",
        "size": "المقاس",
        "color": "الموديل",
        "variant": "الكود",
        "subtotal": "المجموع الفرعي",
        "delivery": "التوصيل",
        "total": "المجموع الكلي",
    },
}


def label(locale: Locale, key: str) -> str:
    return LABELS[locale][key]


def _field(record: Any, name: str) -> Optional[str]:
    if isinstance(record, dict):
        return record.get(name)
    return getattr(record, name, None)


def resolve_localized(record: Any, field: str, locale: Locale) -> str:
    """
    Return the first non-empty of `<field>_<locale>`, `<field>_<other locale>`
    and the legacy `<field>`. Works on ORM rows, schemas and plain dicts.
    """
    for name in (f"{field}_{locale.value}", f"{field}_{locale.other.value}", field):
        value = _field(record, name)
        if value:
            return value
    return ""
