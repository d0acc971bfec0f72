"""Tests for tracked-product field validation."""

from datetime import date

import pytest

from stock_engines.tracking import TrackingRequirements, validate_required_tracking_fields
from stock_kernel.exceptions import MissingTrackingFieldError, TrackingError


class TestValidateRequiredTrackingFields:
    def test_untracked_product_needs_nothing(self):
        requirements = TrackingRequirements()

        assert not requirements.is_tracked
        validate_required_tracking_fields(requirements)

    def test_all_fields_present(self):
        requirements = TrackingRequirements(True, True, True)

        validate_required_tracking_fields(
            requirements,
            batch_number="B-1",
            expiry_date=date(2027, 1, 1),
            serial_number="SN-9",
        )

    def test_missing_batch(self):
        with pytest.raises(MissingTrackingFieldError) as exc_info:
            validate_required_tracking_fields(TrackingRequirements(requires_batch=True))

        assert exc_info.value.field_name == "batch_number"
        assert str(exc_info.value) == "This product requires a batch number"

    def test_blank_serial_counts_as_missing(self):
        with pytest.raises(MissingTrackingFieldError) as exc_info:
            validate_required_tracking_fields(
                TrackingRequirements(requires_serial=True), serial_number="   "
            )

        assert exc_info.value.field_name == "serial_number"

    def test_expiry_message_uses_an(self):
        with pytest.raises(MissingTrackingFieldError, match="requires an expiry date"):
            validate_required_tracking_fields(TrackingRequirements(requires_expiry=True))

    def test_batch_checked_before_expiry_and_serial(self):
        with pytest.raises(TrackingError) as exc_info:
            validate_required_tracking_fields(TrackingRequirements(True, True, True))

        assert exc_info.value.field_name == "batch_number"
        assert exc_info.value.code == "MISSING_TRACKING_FIELD"
