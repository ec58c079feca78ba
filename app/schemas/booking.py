from pydantic import BaseModel, Field
from datetime import datetime
from typing import Literal, Optional


# --- UPDATE (Provider or Admin) ---
class PaymentStatusUpdate(BaseModel):
    payment_status: Literal["pending", "paid", "refunded", "failed"] = Field(
        ..., description="Allowed values: pending, paid, refunded, failed"
    )


# --- RESPONSE ---
class BookingResponse(BaseModel):
    id: int
    quote_id: int
    request_id: int
    customer_id: int
    provider_id: int
    scheduled_date: datetime
    status: str
    total_price: float
    payment_status: str
    completed_at: Optional[datetime]
    created_at: datetime
    updated_at: Optional[datetime]

    class Config:
        from_attributes = True
