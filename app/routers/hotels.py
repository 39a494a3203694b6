from fastapi import APIRouter

from app.dependencies import SearchIndexDep
from app.schemas.responses import HotelLookupResponse

router = APIRouter()


@router.get("/hotels/{locale}/{hotel_id}", response_model=HotelLookupResponse)
async def get_hotel(locale: str, hotel_id: str, search_index: SearchIndexDep) -> HotelLookupResponse:
    document = await search_index.get_hotel(hotel_id, locale)
    if document is None:
        return HotelLookupResponse(not_found=True)
    return HotelLookupResponse(result=document)
