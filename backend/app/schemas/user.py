from pydantic import BaseModel, ConfigDict
from typing import List, Optional


class Person(BaseModel):
    """A Webex person as returned by /people. Unknown fields are kept."""
    model_config = ConfigDict(extra="allow")

    id: str
    displayName: Optional[str] = None
    firstName: Optional[str] = None
    lastName: Optional[str] = None
    emails: List[str] = []

    @property
    def display_name(self) -> str:
        if self.displayName:
            return self.displayName
        full_name = " ".join(part for part in (self.firstName, self.lastName) if part)
        return full_name or "Unknown User"


class PersonList(BaseModel):
    model_config = ConfigDict(extra="allow")

    items: List[Person] = []
