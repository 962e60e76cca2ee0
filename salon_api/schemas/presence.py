import datetime
from typing import Literal, Optional

from pydantic import BaseModel


class PresenceIn(BaseModel):
    hairdresser_id: str
    salon_id: str
    date: Optional[datetime.date] = None


class PresenceToggleIn(BaseModel):
    hairdresser_id: str
    salon_id: str
    date: datetime.date


class PresenceOut(BaseModel):
    id: str
    hairdresser_id: str
    salon_id: str
    date: datetime.date
    created_at: Optional[datetime.datetime] = None
    first_name: Optional[str] = None
    last_name: Optional[str] = None
    salon_name: Optional[str] = None


class PresenceCheckOut(BaseModel):
    isPresent: bool
    record: Optional[PresenceOut] = None


class PresenceToggleOut(BaseModel):
    action: Literal["added", "removed"]
    isPresent: bool
    record: Optional[PresenceOut] = None


class PresenceDeleteOut(BaseModel):
    message: str
    presence: PresenceOut
