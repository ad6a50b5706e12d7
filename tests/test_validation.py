import pytest

from extractly.validation import (
    is_valid_url,
    is_valid_uuid,
    lenient_int,
    sanitize_html,
    validate_ingest_request,
    validate_pagination_params,
)

VALID = {
    "url": "https://example.com/product/1",
    "html": "<html><body>ok</body></html>",
    "instruction": "get the product name",
}


def with_(**changes):
    data = dict(VALID)
    data.update(changes)
    return data


def test_accepts_well_formed_request():
    result = validate_ingest_request(VALID)
    assert result.is_valid
    assert result.errors == []


@pytest.mark.parametrize(
    "data, message",
    [
        (with_(url=None), "URL is required and must be a string"),
        (with_(url=42), "URL is required and must be a string"),
        (with_(url="not a url"), "URL must be a valid URL format"),
        (with_(url="https://"), "URL must be a valid URL format"),
        (with_(html=None), "HTML content is required and must be a string"),
        (with_(html=""), "HTML content is required and must be a string"),
        (with_(html="   \n "), "HTML content cannot be empty"),
        (with_(instruction=None), "Instruction is required and must be a string"),
        (with_(instruction="   "), "Instruction cannot be empty"),
        (with_(instruction="x" * 1001), "Instruction must be less than 1000 characters"),
    ],
)
def test_rejects_bad_fields(data, message):
    result = validate_ingest_request(data)
    assert not result.is_valid
    assert message in result.errors


def test_instruction_at_limit_is_accepted():
    assert validate_ingest_request(with_(instruction="x" * 1000)).is_valid


def test_html_size_limit():
    result = validate_ingest_request(with_(html="<p>" + "a" * 20 + "</p>"), max_html_size=10)
    assert result.errors == ["HTML content exceeds maximum size of 10 characters"]


def test_missing_everything_reports_all_errors():
    result = validate_ingest_request({})
    assert len(result.errors) == 3


@pytest.mark.parametrize(
    "value, expected",
    [
        ("https://example.com", True),
        ("http://localhost:3000/path?q=1", True),
        ("chrome-extension://abcdef/popup.html", True),
        ("example.com", False),
        ("", False),
        ("http//missing-colon.com", False),
    ],
)
def test_is_valid_url(value, expected):
    assert is_valid_url(value) is expected


def test_pagination_params():
    assert (validate_pagination_params("2", "20").page, validate_pagination_params("2", "20").limit) == (2, 20)
    params = validate_pagination_params("0", "500")
    assert params.errors == ["Page must be a positive integer", "Limit cannot exceed 100"]
    assert (params.page, params.limit) == (1, 10)
    assert validate_pagination_params("1001").errors == ["Page cannot exceed 1000"]
    assert validate_pagination_params(None, "abc").errors == ["Limit must be a positive integer"]


@pytest.mark.parametrize(
    "value, expected",
    [(None, 10), ("", 10), ("abc", 10), ("0", 10), ("-3", 10), ("25", 25), ("7items", 7)],
)
def test_lenient_int(value, expected):
    assert lenient_int(value, 10) == expected


def test_is_valid_uuid():
    assert is_valid_uuid("3f2b8c1e-9a4d-4c2b-8f1e-2d3c4b5a6978")
    assert not is_valid_uuid("not-a-uuid")


def test_sanitize_html():
    html = '<a href="javascript:alert(1)" onclick="steal()">x</a><script>bad()</script>'
    assert sanitize_html(html) == '<a href="alert(1)" >x</a>'
