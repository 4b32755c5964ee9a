from enum import Enum
from typing import List, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator


class Intent(str, Enum):
    LIST_CATEGORIES = "LIST_CATEGORIES"
    VIEW_CATEGORY = "VIEW_CATEGORY"
    VIEW_SUBCATEGORY = "VIEW_SUBCATEGORY"
    VIEW_PRODUCT = "VIEW_PRODUCT"
    ASK_PRODUCT_ATTRIBUTE = "ASK_PRODUCT_ATTRIBUTE"
    LIST_PRODUCTS = "LIST_PRODUCTS"
    TALK_TO_HUMAN = "TALK_TO_HUMAN"
    UNKNOWN = "UNKNOWN"
    # so as regras deterministicas produzem estas duas
    GREETING = "GREETING"
    STORE_INFO = "STORE_INFO"


# Intents que o interpretador LLM pode devolver
LLM_INTENTS = {
    Intent.LIST_CATEGORIES,
    Intent.VIEW_CATEGORY,
    Intent.VIEW_SUBCATEGORY,
    Intent.VIEW_PRODUCT,
    Intent.ASK_PRODUCT_ATTRIBUTE,
    Intent.LIST_PRODUCTS,
    Intent.TALK_TO_HUMAN,
    Intent.UNKNOWN,
}


def _blank_to_none(value):
    if value is None:
        return None
    if not isinstance(value, str):
        value = str(value)
    value = value.strip()
    if not value or value.lower() in {"null", "none"}:
        return None
    return value


class IntentResult(BaseModel):
    model_config = ConfigDict(frozen=True)

    intent: Intent = Intent.UNKNOWN
    category: Optional[str] = None
    subcategory: Optional[str] = None
    product: Optional[str] = None
    attribute: Optional[str] = None
    confidence: float = Field(default=0.0, ge=0.0, le=1.0)
    source: str = "fallback"  # rules | llm | fuzzy_rescue | fallback

    @field_validator("category", "subcategory", "product", "attribute", mode="before")
    @classmethod
    def _clean_names(cls, value):
        return _blank_to_none(value)

    @classmethod
    def unknown(cls, source: str = "fallback") -> "IntentResult":
        return cls(intent=Intent.UNKNOWN, confidence=0.0, source=source)


class SessionContext(BaseModel):
    """O minimo de memoria que o classificador enxerga."""

    last_category: Optional[str] = None
    last_subcategory: Optional[str] = None
    last_product: Optional[str] = None


class Product(BaseModel):
    model_config = ConfigDict(frozen=True)

    id: str
    name: str
    description: Optional[str] = None
    price: Optional[float] = None
    category: str
    subcategory: Optional[str] = None
    available: bool = True

    @field_validator("description", "subcategory", mode="before")
    @classmethod
    def _clean_optional(cls, value):
        return _blank_to_none(value)


class Company(BaseModel):
    model_config = ConfigDict(frozen=True)

    id: str
    name: str
    whatsapp_phone_number_id: Optional[str] = None
    address: Optional[str] = None
    business_hours: Optional[str] = None
    payment_methods: List[str] = Field(default_factory=list)
