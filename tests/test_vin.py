import httpx
import pytest

from consent.vin_fields import derive_vin_fields, index_results
from consent_service.vin import VinDecoder

VIN = "1HGBH41JXMN109186"
NA = "Not Applicable"


def _rows(**values):
    names = {"Make": "Make", "Model": "Model", "Series": "Series", "Trim": "Trim", "ModelYear": "Model Year"}
    return [{"Variable": names[k], "Value": v, "VariableId": i} for i, (k, v) in enumerate(values.items())]


def _decoder(handler):
    return VinDecoder(base_url="https://vpic.test/api/vehicles/", transport=httpx.MockTransport(handler))


# ── Field derivation ────────────────────────────────────────────────


def test_index_results_first_row_wins_and_nulls_are_empty():
    rows = [
        {"Variable": "Make", "Value": "HONDA"},
        {"Variable": "Make", "Value": "ACURA"},
        {"Variable": "Trim", "Value": None},
        {"Value": "orphan"},
        "junk",
    ]
    assert index_results(rows) == {"Make": "HONDA", "Trim": ""}


def test_model_falls_back_to_series_when_model_is_placeholder():
    result = derive_vin_fields(VIN, _rows(Make="Honda", Model=NA, Series="Civic", ModelYear="2021"))
    assert result.make_model == "Honda Civic"
    assert result.model_year == "2021"


def test_model_falls_back_to_trim_when_model_and_series_absent():
    result = derive_vin_fields(VIN, _rows(Make="Honda", Model="", Series=NA, Trim="EX-L"))
    assert result.model == "EX-L"


def test_placeholder_make_and_year_are_absent():
    result = derive_vin_fields(VIN, _rows(Make=NA, Model="Civic", ModelYear=NA))
    assert result.make == ""
    assert result.make_model == "Civic"
    assert result.model_year == ""


def test_all_placeholders_give_empty_fields():
    result = derive_vin_fields(VIN, _rows(Make=NA, Model=NA, Series=NA, Trim=NA, ModelYear=NA))
    assert result.make_model == ""
    assert result.model_year == ""
    assert result.vin == VIN


# ── HTTP client ─────────────────────────────────────────────────────


def test_should_lookup_only_for_full_length_vins():
    decoder = VinDecoder(base_url="https://vpic.test")
    assert decoder.should_lookup(VIN)
    assert not decoder.should_lookup(VIN[:16])
    assert not decoder.should_lookup(VIN + "X")


@pytest.mark.asyncio
async def test_decode_requests_decodevin_endpoint():
    seen = []

    def handler(request: httpx.Request) -> httpx.Response:
        seen.append(request)
        return httpx.Response(200, json={"Results": _rows(Make="Honda", Model=NA, Series="Civic", ModelYear="2021")})

    result = await _decoder(handler).decode(VIN)
    assert result is not None
    assert result.make_model == "Honda Civic"
    assert len(seen) == 1
    assert seen[0].url.path == f"/api/vehicles/DecodeVin/{VIN}"
    assert seen[0].url.params["format"] == "json"


@pytest.mark.asyncio
async def test_decode_returns_none_on_server_error():
    result = await _decoder(lambda request: httpx.Response(503)).decode(VIN)
    assert result is None


@pytest.mark.asyncio
async def test_decode_returns_none_on_transport_error():
    def handler(request: httpx.Request) -> httpx.Response:
        raise httpx.ConnectError("offline", request=request)

    assert await _decoder(handler).decode(VIN) is None


@pytest.mark.asyncio
async def test_decode_returns_none_without_results_list():
    assert await _decoder(lambda request: httpx.Response(200, json={"Message": "oops"})).decode(VIN) is None
    assert await _decoder(lambda request: httpx.Response(200, text="<html>")).decode(VIN) is None
