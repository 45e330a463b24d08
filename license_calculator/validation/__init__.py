"""Validation package."""

from license_calculator.validation.validator import ItemValidator, is_valid_url

__all__ = ["ItemValidator", "is_valid_url"]
