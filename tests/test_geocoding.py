import httpx

from app.services.geocoding_service import GeocodingService, coarse_region


def service_returning(handler) -> GeocodingService:
    return GeocodingService(transport=httpx.MockTransport(handler))


async def test_reverse_geocode_success():
    def handler(request: httpx.Request) -> httpx.Response:
        assert request.url.params["localityLanguage"] == "vi"
        return httpx.Response(200, json={
            "city": "Thành phố Hồ Chí Minh",
            "locality": "Quận 1",
            "principalSubdivision": "Thành phố Hồ Chí Minh",
            "countryName": "Việt Nam",
        })

    result = await service_returning(handler).reverse_geocode(10.776, 106.700)

    assert result["city"] == "Hồ Chí Minh"
    assert result["address"] == "Quận 1, Thành phố Hồ Chí Minh, Việt Nam"
    assert result["lat"] == 10.776


async def test_reverse_geocode_falls_back_on_error():
    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(500)

    result = await service_returning(handler).reverse_geocode(21.0285, 105.8542)

    assert result["address"] == "Vị trí: 21.0285, 105.8542"
    assert result["city"] == "Miền Bắc"


async def test_reverse_geocode_falls_back_on_network_error():
    def handler(request: httpx.Request) -> httpx.Response:
        raise httpx.ConnectError("offline", request=request)

    result = await service_returning(handler).reverse_geocode(15.1205, 108.7923)

    assert result["city"] == "Miền Trung"


async def test_reverse_geocode_empty_body():
    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(200, json={})

    result = await service_returning(handler).reverse_geocode(10.0, 105.0)

    assert result["city"] == "Miền Nam"


def test_coarse_region():
    assert coarse_region(21.0) == "Miền Bắc"
    assert coarse_region(15.12) == "Miền Trung"
    assert coarse_region(10.8) == "Miền Nam"
