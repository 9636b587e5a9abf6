"""Tests for public exceptions."""

import pytest

from mediator_http.exceptions import (
    MediatorHttpAPIError,
    MediatorHttpConfigError,
    MediatorHttpError,
    MediatorHttpValidationError,
)


class TestMediatorHttpError:
    """Tests for base MediatorHttpError."""

    def test_is_exception(self):
        assert issubclass(MediatorHttpError, Exception)

    def test_can_be_raised(self):
        with pytest.raises(MediatorHttpError) as exc_info:
            raise MediatorHttpError("test error")
        assert str(exc_info.value) == "test error"


class TestMediatorHttpAPIError:
    """Tests for MediatorHttpAPIError."""

    def test_with_message_only(self):
        error = MediatorHttpAPIError("Request failed")
        assert str(error) == "Request failed"
        assert error.status_code is None

    def test_with_status_code(self):
        error = MediatorHttpAPIError("Not found", status_code=404)
        assert error.status_code == 404

    def test_can_be_caught_as_base_error(self):
        with pytest.raises(MediatorHttpError):
            raise MediatorHttpAPIError("Server error", status_code=500)


@pytest.mark.parametrize("error_cls", [MediatorHttpConfigError, MediatorHttpValidationError])
def test_subclasses_inherit_from_base(error_cls):
    """Config and validation errors should be MediatorHttpErrors."""
    assert issubclass(error_cls, MediatorHttpError)
    with pytest.raises(MediatorHttpError):
        raise error_cls("bad input")
