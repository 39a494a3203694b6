from pydantic import BaseModel, model_validator

# Final path segment of a hotel URL without the ".html" suffix,
# e.g. "guest-house-snezhny-bars-abzakovo"
HotelId = str


class Location(BaseModel):
    model_config = {"frozen": True}

    lat: float
    lon: float

    def in_range(self) -> bool:
        """Strict bounds: the poles and the antimeridian are rejected."""
        return -90 < self.lat < 90 and -180 < self.lon < 180


class Room(BaseModel):
    model_config = {"frozen": True}

    name: str
    max_people: int


class LocaleDocument(BaseModel):
    """Fields parsed from one hotel page in one language."""

    model_config = {"frozen": True}

    hotel_id: HotelId
    locale: str
    name: str
    address: str
    summary: str
    amenities: list[str] = []
    rooms: list[Room] = []
    location: Location | None = None  # only set on the fetch that ran extraction


class HotelRecord(BaseModel):
    model_config = {"frozen": True}

    hotel_id: HotelId
    locale: str
    name: str
    address: str
    summary: str
    location: Location | None = None
    amenities: list[str] = []
    rooms: list[Room] = []

    @model_validator(mode="after")
    def _check_location(self) -> "HotelRecord":
        if self.location is not None and not self.location.in_range():
            raise ValueError(
                f"location out of range: lat={self.location.lat}, lon={self.location.lon}"
            )
        return self

    def to_document(self) -> dict:
        """Body stored in the search index for this (hotel, locale)."""
        doc = self.model_dump(exclude={"hotel_id", "locale", "location"})
        doc["id"] = self.hotel_id
        if self.location is not None:
            doc["location"] = self.location.model_dump()
        return doc
