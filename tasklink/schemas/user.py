from __future__ import annotations

from pydantic import BaseModel, ConfigDict, Field


class Photo(BaseModel):
    model_config = ConfigDict(extra="allow")

    image_60x60: str | None = None


class User(BaseModel):
    """A user as returned by the task API; unknown fields are kept verbatim."""

    model_config = ConfigDict(extra="allow", coerce_numbers_to_str=True)

    id: str
    name: str = ""
    email: str | None = None
    photo: Photo | None = None

    @property
    def photo_url(self) -> str | None:
        if self.photo is None:
            return None
        url = (self.photo.image_60x60 or "").strip()
        return url or None


class UserOut(BaseModel):
    id: str
    name: str
    photo_url: str | None = None

    @classmethod
    def from_user(cls, user: User) -> "UserOut":
        return cls(id=user.id, name=user.name, photo_url=user.photo_url)


class DirectoryOut(BaseModel):
    workspace_id: str
    query: str = ""
    users: list[UserOut] = Field(default_factory=list)
