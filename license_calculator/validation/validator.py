"""
Item List Validation

DESIGN DECISION: Validation reports, it never fixes. Type coercion already
happened when the Items were built; what is left here are the checks that
decide whether a list may be written to storage.

ERRORS block a save:
- An item with an empty name (a freshly added row that was not filled in)

WARNINGS are shown next to the field but never block a save:
- A source URL that is not an http:// or https:// address
"""

from typing import Sequence

from pydantic import AnyHttpUrl, TypeAdapter, ValidationError

from license_calculator.models.item import Item, ValidationIssue, ValidationResult


_HTTP_URL = TypeAdapter(AnyHttpUrl)


def is_valid_url(url: str) -> bool:
    """Empty URLs are valid (the field is optional); others must be http(s)."""
    if not url:
        return True
    try:
        _HTTP_URL.validate_python(url)
    except ValidationError:
        return False
    return True


class ItemValidator:
    """Validates the Store contents before a save."""

    def validate(self, items: Sequence[Item]) -> ValidationResult:
        issues: list[ValidationIssue] = []

        for index, item in enumerate(items):
            if not item.has_name:
                issues.append(ValidationIssue(
                    index=index,
                    field="name",
                    issue_type="missing",
                    message=f"Item {index + 1} has no name",
                    severity="error",
                    suggested_fix="Enter a name or remove the row",
                ))

            if not is_valid_url(item.source_url):
                issues.append(ValidationIssue(
                    index=index,
                    field="source_url",
                    issue_type="invalid_url",
                    message="Please enter a valid http:// or https:// URL",
                    severity="warning",
                ))

        return ValidationResult(item_count=len(items), issues=issues)

    def get_user_friendly_summary(self, result: ValidationResult) -> str:
        """
        Generate a short summary of validation results for the UI.
        """
        if result.is_valid and not result.warnings:
            return "✅ All items are valid."

        lines = []

        if result.has_errors:
            lines.append("❌ Changes are not saved until these are fixed:")
            for issue in result.issues:
                if issue.severity == "error":
                    lines.append(f"   • {issue.message}")
                    if issue.suggested_fix:
                        lines.append(f"     💡 {issue.suggested_fix}")

        if result.warnings:
            lines.append("")
            lines.append("⚠️ Please check:")
            for issue in result.issues:
                if issue.severity == "warning":
                    lines.append(f"   • Item {issue.index + 1}: {issue.message}")

        return "\n".join(lines).strip()
