"""Unit tests for error flattening and pydantic conversion."""

from decimal import Decimal

import pytest
from pydantic import ValidationError as PydanticValidationError
from rest_framework.exceptions import ErrorDetail, ValidationError

from modules.core.exceptions import _flatten, from_pydantic
from modules.orders.dtos import OrderQueryDTO
from modules.orders.entities import OrderItem

pytestmark = pytest.mark.unit


class TestFlatten:
    def test_field_errors_carry_attr(self):
        detail = {"customer_name": [ErrorDetail("This field is required.", code="required")]}
        assert list(_flatten(detail)) == [
            {"code": "required", "detail": "This field is required.", "attr": "customer_name"}
        ]

    def test_nested_list_errors_use_dotted_path(self):
        detail = {
            "items": [
                {},
                {"quantity": [ErrorDetail("Too small.", code="min_value")]},
            ]
        }
        errors = list(_flatten(detail))
        assert errors == [{"code": "min_value", "detail": "Too small.", "attr": "items.1.quantity"}]

    def test_non_field_errors_have_no_attr(self):
        detail = {"non_field_errors": [ErrorDetail("Bad range.", code="invalid")]}
        assert list(_flatten(detail))[0]["attr"] is None

    def test_plain_detail(self):
        errors = list(_flatten(ErrorDetail("Not found.", code="not_found")))
        assert errors == [{"code": "not_found", "detail": "Not found.", "attr": None}]


class TestFromPydantic:
    def test_field_errors_keyed_by_location(self):
        with pytest.raises(PydanticValidationError) as excinfo:
            OrderItem(fabric="Cotton", quantity=Decimal("0"))

        converted = from_pydantic(excinfo.value)

        assert isinstance(converted, ValidationError)
        assert "quantity" in converted.detail

    def test_model_level_error_is_non_field(self):
        with pytest.raises(PydanticValidationError) as excinfo:
            OrderQueryDTO(start_date="2024-05-02", end_date="2024-05-01")

        converted = from_pydantic(excinfo.value)

        assert list(converted.detail) == ["non_field_errors"]
