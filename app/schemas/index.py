"""Typed mapping definitions for the per-language hotel indices."""

from __future__ import annotations

from pydantic import BaseModel

_ANALYZERS = {
    "ru": "russian",
    "en": "english",
}


class FieldMapping(BaseModel):
    type: str
    analyzer: str | None = None
    fields: dict[str, FieldMapping] | None = None
    properties: dict[str, FieldMapping] | None = None


class IndexMapping(BaseModel):
    properties: dict[str, FieldMapping]


class IndexDefinition(BaseModel):
    mappings: IndexMapping

    def body(self) -> dict:
        return self.model_dump(exclude_none=True)


def analyzer_for(language: str) -> str:
    return _ANALYZERS.get(language, "standard")


def build_index_definition(language: str) -> IndexDefinition:
    """Mapping for one language: text fields get a stemmed subfield."""
    stemmed = {f"stemmed-{language}": FieldMapping(type="text", analyzer=analyzer_for(language))}

    return IndexDefinition(
        mappings=IndexMapping(
            properties={
                "id": FieldMapping(type="keyword"),
                "name": FieldMapping(
                    type="text",
                    fields={**stemmed, "raw": FieldMapping(type="keyword")},
                ),
                "address": FieldMapping(type="text", fields=stemmed),
                "summary": FieldMapping(type="text", fields=stemmed),
                "location": FieldMapping(type="geo_point"),
                "amenities": FieldMapping(type="keyword"),
                "rooms": FieldMapping(
                    type="object",
                    properties={
                        "name": FieldMapping(type="text"),
                        "max_people": FieldMapping(type="integer"),
                    },
                ),
            }
        )
    )
