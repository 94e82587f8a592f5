"""Pydantic request models shared by the MCP tools and the HTTP API."""

from pydantic import BaseModel, Field

from .models import Range


class EntryInput(BaseModel):
    content: str = Field(
        description="Entry text. May embed references to other tables: "
        "{{title::table-id::table-name::roll-count::separator}}",
    )
    weight: float = Field(default=1, gt=0, description="Probability weight (default: 1)")
    range: Range | None = Field(default=None, description="Optional inclusive roll range")
    id: str | None = Field(default=None, description="Entry id; generated when omitted")


class EntryUpdate(BaseModel):
    id: str
    content: str | None = None
    weight: float | None = Field(default=None, gt=0)
    range: Range | None = None


class CreateTable(BaseModel):
    name: str
    description: str = ""
    entries: list[EntryInput] = Field(default_factory=list)


class UpdateTable(BaseModel):
    name: str | None = None
    description: str | None = None
    add: list[EntryInput] | None = None
    update: list[EntryUpdate] | None = None
    remove: list[str] | None = None


class CountBody(BaseModel):
    count: int = 1


class CreateTemplate(BaseModel):
    name: str
    template: str
    description: str = ""


class UpdateTemplate(BaseModel):
    name: str | None = None
    description: str | None = None
    template: str | None = None


def entry_dicts(entries: list[EntryInput] | None) -> list[dict]:
    return [e.model_dump(exclude_none=True) for e in entries or []]


def update_dicts(updates: list[EntryUpdate] | None) -> list[dict]:
    return [u.model_dump(exclude_none=True) for u in updates or []]
