"""Pydantic schemas for now-playing responses."""

from pydantic import BaseModel, ConfigDict, Field


class NowPlayingResponse(BaseModel):
    """Name of the game a Steam user is currently playing.

    Serialized with the wire key ``GameName``; empty when the user is not in
    a game or the lookup could not be completed.
    """

    model_config = ConfigDict(populate_by_name=True)

    game_name: str = Field(
        "",
        alias="GameName",
        description="Display name of the current game, or an empty string.",
    )

    def to_json(self) -> str:
        return self.model_dump_json(by_alias=True)
