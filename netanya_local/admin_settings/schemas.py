from datetime import datetime
from typing import Optional

from pydantic import BaseModel


class AdminSettingOut(BaseModel):
    key: str
    value: str
    description: Optional[str] = None
    updated_at: datetime

    model_config = {"from_attributes": True}


class ShowTestOnPublicOut(BaseModel):
    success: bool = True
    show_test_on_public: bool
