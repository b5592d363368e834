import datetime as dt

import pytest

from consent.data_models import FormRecord
from consent.merge import fill_if_present
from consent.response_parsing import ResponseParseError, collect_text, parse_json_object, strip_code_fences
from consent.upload import UNSUPPORTED_UPLOAD_MESSAGE, source_type_for, validate_upload


# ── Upload validation ───────────────────────────────────────────────


@pytest.mark.parametrize("media_type", ["application/pdf", "image/jpeg", "image/jpg", "image/png", "IMAGE/PNG"])
def test_validate_upload_accepts_supported_types(media_type):
    assert validate_upload(media_type) is None


@pytest.mark.parametrize("media_type", ["image/gif", "text/plain", "application/msword", "image/heic", "", None])
def test_validate_upload_rejects_everything_else(media_type):
    assert validate_upload(media_type) == UNSUPPORTED_UPLOAD_MESSAGE


def test_validate_upload_ignores_media_type_parameters():
    assert validate_upload("application/pdf; name=slip.pdf") is None


def test_source_type_classification():
    assert source_type_for("application/pdf") == "document"
    assert source_type_for("image/png") == "image"
    assert source_type_for("image/jpg") == "image"


# ── Response parsing ────────────────────────────────────────────────


def test_collect_text_joins_only_text_parts():
    content = [
        {"type": "text", "text": '{"fullName":'},
        {"type": "tool_use", "name": "x"},
        {"type": "text", "text": '"Jane"}'},
        "garbage",
    ]
    assert collect_text(content) == '{"fullName":\n"Jane"}'


def test_strip_code_fences():
    assert strip_code_fences('```json\n{"a": 1}\n```') == '{"a": 1}'


def test_parse_fenced_json():
    text = '```json\n{"fullName":"Jane Doe","address":"","year":"2019","makeModel":"","vin":"1HGBH41JXMN109186"}\n```'
    parsed = parse_json_object(text)
    assert parsed["fullName"] == "Jane Doe"
    assert parsed["vin"] == "1HGBH41JXMN109186"


def test_parse_salvages_object_from_prose():
    text = 'Here is the data you asked for:\n{"fullName": "Jane Doe", "year": "2019"}\nLet me know if you need more.'
    assert parse_json_object(text) == {"fullName": "Jane Doe", "year": "2019"}


def test_parse_rejects_text_without_object():
    with pytest.raises(ResponseParseError):
        parse_json_object("I could not read this document.")


def test_parse_salvages_first_object_before_trailing_braces():
    text = '{"fullName": "Jane Doe", "year": "2019"}\nNote: address not found {blank}.'
    assert parse_json_object(text) == {"fullName": "Jane Doe", "year": "2019"}


def test_parse_salvages_first_of_several_objects():
    text = 'Result: {"fullName": "Jane Doe"} and alternate {"fullName": "J. Doe"}'
    assert parse_json_object(text)["fullName"] == "Jane Doe"


def test_parse_skips_brace_that_does_not_start_an_object():
    text = 'Fields {see below}: {"vin": "1HGBH41JXMN109186"}'
    assert parse_json_object(text) == {"vin": "1HGBH41JXMN109186"}


def test_parse_rejects_broken_embedded_object():
    with pytest.raises(ResponseParseError):
        parse_json_object('Sure: {"fullName": "Jane", }} trailing')


def test_parse_rejects_non_object_json():
    with pytest.raises(ResponseParseError):
        parse_json_object('["Jane Doe"]')


def test_parse_rejects_empty_text():
    with pytest.raises(ResponseParseError):
        parse_json_object("```json\n```")


# ── Fill-if-present merge ───────────────────────────────────────────


def test_fill_if_present_keeps_existing_values_for_empty_updates():
    rec = FormRecord(full_name="Typed Name", address="1 Main St", year="2018")
    changed = fill_if_present(rec, {"full_name": "", "address": "", "year": "2019", "vin": "ABC"})
    assert rec.full_name == "Typed Name"
    assert rec.address == "1 Main St"
    assert rec.year == "2019"
    assert rec.vin == "ABC"
    assert changed == ["year", "vin"]


def test_fill_if_present_never_touches_date():
    rec = FormRecord(date=dt.date(2024, 3, 5))
    fill_if_present(rec, {"date": "2030-01-01"})
    assert rec.date == dt.date(2024, 3, 5)


def test_fill_if_present_reports_no_change_for_equal_values():
    rec = FormRecord(make_model="Honda Civic")
    assert fill_if_present(rec, {"make_model": "Honda Civic"}) == []
