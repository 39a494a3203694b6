class EmptyCatalogError(Exception):
    def __init__(self, message: str = "Found no hotels on the listing page"):
        self.message = message
        super().__init__(message)


class FetchError(Exception):
    def __init__(
        self,
        message: str,
        hotel_id: str | None = None,
        locale: str | None = None,
        status_code: int | None = None,
    ):
        self.message = message
        self.hotel_id = hotel_id
        self.locale = locale
        self.status_code = status_code
        super().__init__(message)


class InvalidGeoError(Exception):
    def __init__(self, lat: float, lon: float):
        self.lat = lat
        self.lon = lon
        self.message = f"Coordinates out of range: lat={lat}, lon={lon}"
        super().__init__(self.message)


class IndexWriteError(Exception):
    def __init__(self, message: str, status_code: int | None = None):
        self.message = message
        self.status_code = status_code
        super().__init__(message)
