"""Pydantic request/response schemas for the Pay Now API.

The callback itself is form-encoded and parsed by the notification parser;
these schemas only cover the JSON development endpoints.
"""

from decimal import Decimal

from pydantic import BaseModel, Field


class ConfigureVerifierRequest(BaseModel):
    should_verify: bool = True
    should_error: bool = False


class VerifierConfigResponse(BaseModel):
    verifier: str
    should_verify: bool
    should_error: bool


class SeedOrderRequest(BaseModel):
    order_id: str
    key: str
    total_amount: Decimal = Field(ge=0)
    needs_processing: bool = True

    model_config = {
        "json_schema_extra": {
            "examples": [
                {
                    "order_id": "100",
                    "key": "wc_order_abc",
                    "total_amount": "249.99",
                    "needs_processing": True,
                }
            ]
        }
    }


class OrderResponse(BaseModel):
    order_id: str
    key: str
    total_amount: Decimal
    status: str
    notes: list[str]
    return_url: str
    cancel_url: str
