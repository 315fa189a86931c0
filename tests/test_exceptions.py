"""
Tests for custom exceptions and error handling.
"""

import pytest

from het_sensitivity.exceptions import (
    ConfigurationError,
    EstimationCancelledError,
    HetSensitivityError,
    InvalidInputError,
)
from het_sensitivity.cancellation import CancellationToken, check_cancelled


class TestCustomExceptions:
    """Test custom exception hierarchy."""

    def test_base_exception(self):
        error = HetSensitivityError("Base error")
        assert str(error) == "Base error"
        assert error.details == {}

        details = {"index": 3}
        assert HetSensitivityError("Error with details", details).details == details

    @pytest.mark.parametrize("cls", [InvalidInputError, ConfigurationError, EstimationCancelledError])
    def test_subclasses(self, cls):
        error = cls("failed")
        assert isinstance(error, HetSensitivityError)
        assert str(error) == "failed"

    def test_invalid_input_details(self):
        from het_sensitivity.validation import as_weight_vector

        with pytest.raises(InvalidInputError) as exc_info:
            as_weight_vector([1.0, -2.0])
        assert exc_info.value.details == {"index": 1, "value": -2.0}


class TestCancellationToken:
    def test_not_cancelled(self):
        token = CancellationToken()
        assert not token.cancelled
        token.raise_if_cancelled("anything")
        check_cancelled(None, "anything")

    def test_cancelled(self):
        token = CancellationToken()
        token.cancel()
        assert token.cancelled
        with pytest.raises(EstimationCancelledError) as exc_info:
            check_cancelled(token, "sampling")
        assert exc_info.value.details == {"stage": "sampling"}
