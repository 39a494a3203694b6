import logging
from collections.abc import Mapping

from app.exceptions.custom import InvalidGeoError
from app.schemas.hotel import HotelId, HotelRecord, LocaleDocument, Location

logger = logging.getLogger(__name__)


def shared_location(documents: Mapping[str, LocaleDocument]) -> Location | None:
    for document in documents.values():
        if document.location is not None:
            return document.location
    return None


def check_location(location: Location) -> Location:
    if not location.in_range():
        raise InvalidGeoError(location.lat, location.lon)
    return location


def assemble_records(
    hotel_id: HotelId,
    documents: Mapping[str, LocaleDocument],
    location: Location | None = None,
    drop_invalid_location: bool = True,
) -> dict[str, HotelRecord]:
    """Build one record per language, all sharing the same location.

    ``location`` defaults to the one found on whichever page ran the
    extraction. An out-of-range location is dropped from every record
    unless ``drop_invalid_location`` is False, in which case
    InvalidGeoError is raised.
    """
    if location is None:
        location = shared_location(documents)

    if location is not None:
        try:
            location = check_location(location)
        except InvalidGeoError as exc:
            if not drop_invalid_location:
                raise
            logger.warning("Dropping location of %s: %s", hotel_id, exc.message)
            location = None

    return {
        locale: HotelRecord(
            hotel_id=hotel_id,
            locale=locale,
            name=document.name.strip(),
            address=document.address.strip(),
            summary=document.summary.strip(),
            location=location,
            amenities=list(document.amenities),
            rooms=list(document.rooms),
        )
        for locale, document in documents.items()
    }
