import json
from datetime import datetime
from typing import Optional

from pydantic import BaseModel, EmailStr, field_validator

from roombook.core.exceptions import ContactsParseError


class BuildingContacts(BaseModel):
    phone: Optional[str] = None
    email: Optional[EmailStr] = None


def parse_contacts(raw) -> Optional[BuildingContacts]:
    """Parse the stored contacts blob.

    Accepts None, a dict, or JSON object text. Anything else raises
    ContactsParseError instead of being papered over.
    """
    if raw is None or raw == "":
        return None
    if isinstance(raw, BuildingContacts):
        return raw
    if isinstance(raw, str):
        try:
            raw = json.loads(raw)
        except json.JSONDecodeError as e:
            raise ContactsParseError(f"Malformed contacts JSON: {e}") from e
    if not isinstance(raw, dict):
        raise ContactsParseError(f"Contacts must be a JSON object, got {type(raw).__name__}")
    return BuildingContacts(**raw)


def dump_contacts(contacts: Optional[BuildingContacts]) -> Optional[str]:
    if contacts is None:
        return None
    return json.dumps(contacts.model_dump(mode="json", exclude_none=True))


class BuildingBase(BaseModel):
    name: str
    short_name: str
    address: Optional[str] = None
    website: Optional[str] = None
    contacts: Optional[BuildingContacts] = None
    latitude: Optional[float] = None
    longitude: Optional[float] = None

    @field_validator("contacts", mode="before")
    @classmethod
    def load_contacts(cls, value):
        return parse_contacts(value)


class BuildingCreate(BuildingBase):
    available: bool = True


class BuildingUpdate(BaseModel):
    name: Optional[str] = None
    short_name: Optional[str] = None
    address: Optional[str] = None
    website: Optional[str] = None
    contacts: Optional[BuildingContacts] = None
    available: Optional[bool] = None
    latitude: Optional[float] = None
    longitude: Optional[float] = None

    @field_validator("contacts", mode="before")
    @classmethod
    def load_contacts(cls, value):
        return parse_contacts(value)


class BuildingOut(BuildingBase):
    id: int
    available: bool
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    model_config = {"from_attributes": True}
