"""
Data contracts for Steam Web API responses used when linking accounts.
"""

from pydantic import BaseModel, Field


class OwnedGame(BaseModel):
    """A game in a user's library (IPlayerService/GetOwnedGames)."""

    appid: int = Field(..., gt=0)
    name: str = Field(default="")
    playtime_forever: int = Field(default=0, ge=0, description="Minutes played")
    img_icon_url: str | None = Field(default=None, description="Icon hash")


class OwnedGamesResponse(BaseModel):
    """
    Inner `response` object of GetOwnedGames.

    Private profiles come back as an empty object, so every
    field is optional.
    """

    game_count: int = 0
    games: list[OwnedGame] = Field(default_factory=list)


class VanityResolution(BaseModel):
    """Inner `response` object of ISteamUser/ResolveVanityURL."""

    success: int
    steamid: str | None = None
    message: str | None = None

    @property
    def resolved(self) -> bool:
        """Steam reports success=1 on a match and 42 when nothing matched."""
        return self.success == 1 and bool(self.steamid)
