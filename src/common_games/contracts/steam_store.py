"""
Data contracts for Steam Store API responses.

Only the slice of /appdetails the multiplayer classifier reads is
modelled here; everything else in the payload is ignored.
"""

from typing import Annotated

from pydantic import BaseModel, Field

# Steam application id
AppId = Annotated[int, Field(gt=0, description="Steam App ID")]


class Category(BaseModel):
    """Store feature tag (e.g. "Online Co-op")."""

    id: int
    description: str = ""


class StoreAppDetails(BaseModel):
    """
    Game data from the Store API, filtered to categories.

    Represents the `data` object of an /appdetails entry.
    """

    steam_appid: int | None = Field(default=None, description="Steam application ID")
    name: str | None = Field(default=None, description="Game name")
    categories: list[Category] = Field(default_factory=list)


class StoreAppDetailsEntry(BaseModel):
    """
    One entry of the Store API response.

    The API returns {app_id: {success: bool, data: {...}}}
    """

    success: bool
    data: StoreAppDetails | None = None
