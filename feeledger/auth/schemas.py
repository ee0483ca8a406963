from typing import Dict
from uuid import UUID

from pydantic import BaseModel


class CurrentUser(BaseModel):
    id: UUID
    role: str
    permissions: Dict[str, Dict[str, bool]]
