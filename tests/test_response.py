import pytest

from clickwire.response import (
    BadResponseError,
    bad_response_reason,
    detect_exceptions,
    extract_exception,
    stringify_status,
)

EXCEPTION = (
    b"Code: 159. DB::Exception: Timeout exceeded: elapsed 0.1 seconds, "
    b"maximum: 0.1: While executing Numbers. (TIMEOUT_EXCEEDED) "
    b"(version 23.1.1.1 (official build))\n"
)


def _recording_source(chunks, consumed):
    for chunk in chunks:
        consumed.append(chunk)
        yield chunk


def test_extract_exception_splits_data_and_error():
    data = b"ABCDEABCDE"
    rest, err = extract_exception(data + EXCEPTION)
    assert rest == data
    assert isinstance(err, BadResponseError)
    assert err.reason == EXCEPTION[:-1].decode()
    assert "TIMEOUT_EXCEEDED" in str(err)


def test_extract_exception_whole_chunk():
    rest, err = extract_exception(EXCEPTION)
    assert rest == b""
    assert err is not None
    assert err.reason.startswith("Code: 159.")


def test_extract_exception_plain_data():
    data = b"some ordinary row data"
    rest, err = extract_exception(data)
    assert rest == data
    assert err is None


def test_extract_exception_tail_without_marker():
    data = b"value (a (b))\n"
    assert extract_exception(data) == (data, None)


def test_extract_exception_code_without_db_exception():
    data = b"xx Code: 1. Something else (v (x))\n"
    assert extract_exception(data) == (data, None)


def test_extract_exception_uses_last_code():
    first = b"Code: 1. DB::Exception: first (version 1 (official build))\n"
    rest, err = extract_exception(first + EXCEPTION)
    assert rest == first
    assert err.reason == EXCEPTION[:-1].decode()


def test_extract_exception_invalid_utf8_is_replaced():
    bad = b"Code: 2. DB::Exception: \xff (version 1 (official build))\n"
    rest, err = extract_exception(b"data" + bad)
    assert rest == b"data"
    assert "\ufffd" in err.reason


def test_stringify_status_known():
    assert stringify_status(404) == "404 Not Found"
    assert stringify_status(500) == "500 Internal Server Error"


def test_stringify_status_unknown():
    assert stringify_status(599) == "599 <unknown>"


def test_bad_response_reason_trims_body():
    body = b"  Code: 60. DB::Exception: Table does not exist.\n"
    assert bad_response_reason(404, body) == body.decode().strip()


def test_bad_response_reason_unreadable_body():
    assert bad_response_reason(500, b"\xff\xfe") == stringify_status(500)


def test_bad_response_reason_missing_body():
    assert bad_response_reason(502, None) == stringify_status(502)


def test_detect_exceptions_passes_data_through():
    chunks = [b"abc", b"def", b""]
    assert list(detect_exceptions(chunks)) == chunks


def test_detect_exceptions_raises_after_data():
    consumed = []
    source = _recording_source((b"first", b"second" + EXCEPTION, b"never"), consumed)

    received = []
    with pytest.raises(BadResponseError) as info:
        for chunk in detect_exceptions(source):
            received.append(chunk)
    assert received == [b"first", b"second"]
    assert info.value.reason == EXCEPTION[:-1].decode()
    assert b"never" not in consumed


def test_detect_exceptions_empty_data_before_error():
    gen = detect_exceptions([EXCEPTION])
    assert next(gen) == b""
    with pytest.raises(BadResponseError):
        next(gen)