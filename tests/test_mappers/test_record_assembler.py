import pytest
from pydantic import ValidationError

from app.exceptions.custom import InvalidGeoError
from app.mappers.record_assembler import assemble_records
from app.schemas.hotel import HotelRecord, LocaleDocument, Location, Room


def _doc(locale, name="Hotel", location=None):
    return LocaleDocument(
        hotel_id="alpha",
        locale=locale,
        name=name,
        address=" Lesnaya 1 ",
        summary="Nice",
        amenities=["Parking"],
        rooms=[Room(name="Double", max_people=2)],
        location=location,
    )


def test_location_shared_by_every_language():
    loc = Location(lat=53.81, lon=58.63)
    records = assemble_records(
        "alpha", {"ru": _doc("ru", "Отель", location=loc), "en": _doc("en")}
    )

    assert set(records) == {"ru", "en"}
    assert records["ru"].location == loc
    assert records["en"].location == loc
    assert records["ru"].name == "Отель"
    assert records["en"].address == "Lesnaya 1"
    assert records["en"].rooms == [Room(name="Double", max_people=2)]


def test_explicit_location_wins():
    loc = Location(lat=10.0, lon=20.0)
    records = assemble_records("alpha", {"en": _doc("en")}, location=loc)
    assert records["en"].location == loc


def test_no_location():
    records = assemble_records("alpha", {"en": _doc("en")})
    assert records["en"].location is None


def test_no_documents():
    assert assemble_records("alpha", {}) == {}


@pytest.mark.parametrize(
    "lat,lon",
    [(90, 0), (-90, 0), (0, 180), (0, -180), (120.5, 10), (10, -200)],
)
def test_out_of_range_location_is_dropped(lat, lon):
    records = assemble_records(
        "alpha", {"ru": _doc("ru", location=Location(lat=lat, lon=lon)), "en": _doc("en")}
    )
    assert records["ru"].location is None
    assert records["en"].location is None
    assert records["ru"].name == "Hotel"


def test_near_boundary_location_is_kept():
    loc = Location(lat=89.9, lon=179.9)
    records = assemble_records("alpha", {"en": _doc("en", location=loc)})
    assert records["en"].location == loc


def test_invalid_location_can_raise():
    with pytest.raises(InvalidGeoError) as exc_info:
        assemble_records(
            "alpha",
            {"en": _doc("en", location=Location(lat=90, lon=0))},
            drop_invalid_location=False,
        )
    assert exc_info.value.lat == 90


def test_record_rejects_invalid_location():
    with pytest.raises(ValidationError):
        HotelRecord(
            hotel_id="alpha",
            locale="en",
            name="Hotel",
            address="",
            summary="",
            location=Location(lat=0, lon=180),
        )


def test_to_document():
    record = assemble_records(
        "alpha", {"en": _doc("en", location=Location(lat=1.5, lon=2.5))}
    )["en"]
    assert record.to_document() == {
        "id": "alpha",
        "name": "Hotel",
        "address": "Lesnaya 1",
        "summary": "Nice",
        "location": {"lat": 1.5, "lon": 2.5},
        "amenities": ["Parking"],
        "rooms": [{"name": "Double", "max_people": 2}],
    }


def test_to_document_without_location():
    record = assemble_records("alpha", {"en": _doc("en")})["en"]
    assert "location" not in record.to_document()
