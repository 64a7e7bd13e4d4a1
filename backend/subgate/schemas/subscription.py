from pydantic import BaseModel, Field
from typing import Optional
from datetime import datetime


class SubscriptionStatus(BaseModel):
    is_subscribed: bool = Field(serialization_alias="isSubscribed")
    subscription_ends: Optional[datetime] = Field(default=None, serialization_alias="subscriptionEnds")


class SubscriptionActivated(BaseModel):
    message: str
    subscription_ends: datetime = Field(serialization_alias="subscriptionEnds")
