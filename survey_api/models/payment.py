"""Payment model definitions."""

from pydantic import BaseModel, ConfigDict, Field, field_validator

# Stripe caps a single charge at 99,999,999 minor units.
MAX_PRICE = 999_999.99


class PaymentIntentRequest(BaseModel):
    price: float = Field(gt=0, le=MAX_PRICE, allow_inf_nan=False)

    @field_validator('price')
    @classmethod
    def validate_chargeable(cls, value: float) -> float:
        if round(value * 100) < 1:
            raise ValueError('Price must be at least one cent.')
        return value


class PaymentCreate(BaseModel):
    """A completed payment as reported by the client after confirming the intent."""

    model_config = ConfigDict(extra="allow")

    email: str
