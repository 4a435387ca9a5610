from types import SimpleNamespace

import pytest

from leanerr.errors.guards import ensure_error, fail, fail_on_missing
from leanerr.errors.types import ErrorKind, StructuredError


@pytest.mark.parametrize("value", [None, "", 0, False, [], {}])
def test_fail_is_a_noop_for_empty_values(value: object) -> None:
    assert fail(value) is None
    assert fail(value, {"meta": "ignored"}) is None


def test_fail_raises_structured_error_from_string() -> None:
    with pytest.raises(StructuredError, match="unexpected thing") as info:
        fail("unexpected thing")

    assert info.value.message == "unexpected thing"
    assert info.value.kind is ErrorKind.DOMAIN
    assert info.value.meta is None


def test_fail_attaches_meta() -> None:
    meta = {"msg": "x", "xyz": 123}

    with pytest.raises(StructuredError) as info:
        fail("unexpected thing", meta)

    assert info.value.meta is meta


@pytest.mark.parametrize("meta", [0, "", {}, False])
def test_fail_attaches_falsy_meta_unchanged(meta: object) -> None:
    with pytest.raises(StructuredError) as info:
        fail("x", meta)

    assert info.value.meta is meta


def test_fail_never_overwrites_existing_meta() -> None:
    err = StructuredError("boom", meta={"first": True})

    with pytest.raises(StructuredError) as info:
        fail(err, {"second": True})

    assert info.value is err
    assert err.meta == {"first": True}


def test_fail_wraps_plain_exceptions() -> None:
    original = OSError("disk full")

    with pytest.raises(StructuredError) as info:
        fail(original)

    assert info.value.message == "disk full"
    assert info.value.__cause__ is original


def test_fail_stringifies_other_values() -> None:
    with pytest.raises(StructuredError, match="404"):
        fail(404)


def test_ensure_error_returns_structured_errors_unchanged() -> None:
    err = StructuredError("same")
    assert ensure_error(err) is err


def test_ensure_error_uses_requested_kind() -> None:
    assert ensure_error("x", kind=ErrorKind.UPSTREAM).kind is ErrorKind.UPSTREAM
    assert ensure_error(ValueError("v")).kind is ErrorKind.UNEXPECTED


def test_fail_on_missing_reclassifies_not_found_attribute() -> None:
    store_err = SimpleNamespace(errmsg="No matching object found")

    with pytest.raises(StructuredError, match="order does not exist"):
        fail_on_missing(store_err, "order does not exist")


def test_fail_on_missing_reclassifies_not_found_mapping() -> None:
    with pytest.raises(StructuredError, match="gone"):
        fail_on_missing({"errmsg": "No matching object found"}, "gone")


def test_fail_on_missing_passes_other_errors_through() -> None:
    store_err = RuntimeError("connection reset")

    with pytest.raises(StructuredError, match="connection reset") as info:
        fail_on_missing(store_err, "order does not exist")
    assert info.value.__cause__ is store_err


def test_fail_on_missing_is_a_noop_without_error() -> None:
    assert fail_on_missing(None, "order does not exist") is None
