"""Runtime settings, read from environment variables.

    ENV / ENVIRONMENT          development | test | staging | production
    APP_ID                     scopes the order namespace (default "storefront")
    STORE_ADAPTER              document store adapter (default "memory")
    ORDER_PROGRESSION          "simulated" advances orders client-side, "none" leaves
                               status changes to an external fulfillment service
    ADVANCE_INTERVAL_SECONDS   delay before each simulated advance (default 3)
    AUTH_TOKEN                 optional token for the initial sign-in
"""

import os
from enum import Enum

from pydantic import BaseModel, Field


class ProgressionMode(Enum):
    SIMULATED = "simulated"
    NONE = "none"


class Settings(BaseModel):
    model_config = {"frozen": True}

    env: str = "development"
    app_id: str = Field(default="storefront", min_length=1)
    store_adapter: str = "memory"
    order_progression: ProgressionMode = ProgressionMode.SIMULATED
    advance_interval: float = Field(default=3.0, gt=0)
    auth_token: str | None = None

    @classmethod
    def from_env(cls, environ=None):
        environ = os.environ if environ is None else environ
        values = {
            "env": (environ.get("ENV") or environ.get("ENVIRONMENT") or "development").lower(),
            "app_id": environ.get("APP_ID", "storefront"),
            "store_adapter": environ.get("STORE_ADAPTER", "memory"),
            "order_progression": environ.get("ORDER_PROGRESSION", ProgressionMode.SIMULATED.value).lower(),
            "auth_token": environ.get("AUTH_TOKEN") or None,
        }
        if environ.get("ADVANCE_INTERVAL_SECONDS"):
            values["advance_interval"] = environ["ADVANCE_INTERVAL_SECONDS"]
        return cls(**values)
