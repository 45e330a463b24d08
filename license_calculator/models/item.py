"""
Core Data Models for License Calculator

These models define the schemas for all data flowing through the system:
1. Items (the priced records users search and manage)
2. Quotes (what the console displays for a selection)
3. Search results and save outcomes
4. Validation results

DESIGN DECISION: Items are immutable value objects. The Store owns identity
(stable keys) and order; an Item only carries its field values. Replacing an
Item is the only way to "edit" one, which means subscribers can never observe
a half-applied change.
"""

import math
import re
from datetime import datetime
from decimal import Decimal, InvalidOperation
from enum import Enum
from typing import Any, Optional

from pydantic import (
    BaseModel,
    ConfigDict,
    Field,
    field_validator,
)


# Leading-number parse, same semantics as a browser's parseFloat():
# "12abc" -> 12, "1,5" -> 1, ".5" -> 0.5, "abc" -> no match.
_LEADING_NUMBER = re.compile(r"^\s*[+-]?(\d+(\.\d*)?|\.\d+)([eE][+-]?\d+)?")


def coerce_price(value: Any) -> Decimal:
    """
    Coerce arbitrary input into a non-negative Decimal price.

    Invalid, empty or non-finite input becomes 0. Negative values clamp to 0.
    """
    if value is None or isinstance(value, bool):
        return Decimal("0")

    if isinstance(value, Decimal):
        number = value
    elif isinstance(value, (int, float)):
        if isinstance(value, float) and not math.isfinite(value):
            return Decimal("0")
        number = Decimal(str(value))
    else:
        match = _LEADING_NUMBER.match(str(value))
        if not match:
            return Decimal("0")
        try:
            number = Decimal(match.group(0).strip())
        except InvalidOperation:
            return Decimal("0")

    if not number.is_finite() or number < 0:
        return Decimal("0")
    return number


def format_price(price: Decimal) -> str:
    """Render a price without trailing zeros: 20.00 -> '20', 19.90 -> '19.9'."""
    if price == price.to_integral_value():
        return str(int(price))
    return format(price.normalize(), "f")


# =============================================================================
# ENUMS
# =============================================================================

class DisplayMode(str, Enum):
    """
    How the console renders a quote.

    Price-less items are informational: only their link is shown.
    """
    BLANK = "blank"                        # Nothing selected / no quantity
    PRICED = "priced"                      # Breakdown + total
    PRICED_WITH_LINK = "priced_with_link"  # Breakdown + total + link
    LINK_ONLY = "link_only"                # Link only, no breakdown/total


class MatchState(str, Enum):
    """State of the search results dropdown."""
    HIDDEN = "hidden"    # Query empty: render nothing
    EMPTY = "empty"      # Query given, nothing matched: disabled placeholder
    MATCHES = "matches"  # At least one selectable match


class SaveStatus(str, Enum):
    """Outcome of one autosave cycle."""
    SAVED = "saved"
    SKIPPED = "skipped"  # Validation failed; nothing written
    FAILED = "failed"    # Storage rejected the write


# =============================================================================
# ITEM
# =============================================================================

class Item(BaseModel):
    """
    A named priced record with an optional reference URL.

    Construction normalizes loose input the same way every entry point does
    (manual edits, CSV rows, storage rows):
    - name and source_url are coerced to str and trimmed
    - price is coerced to a non-negative Decimal (monthly price)
    """
    model_config = ConfigDict(frozen=True)

    name: str = Field(
        default="",
        description="Display name (may be empty while being edited)"
    )
    price: Decimal = Field(
        default=Decimal("0"),
        ge=0,
        description="Monthly price"
    )
    source_url: str = Field(
        default="",
        description="Link to the pricing source, '' if absent"
    )

    @field_validator("name", "source_url", mode="before")
    @classmethod
    def coerce_text(cls, v: Any) -> str:
        if v is None:
            return ""
        return str(v).strip()

    @field_validator("price", mode="before")
    @classmethod
    def normalize_price(cls, v: Any) -> Decimal:
        return coerce_price(v)

    @classmethod
    def from_record(cls, record: dict) -> "Item":
        """
        Build an Item from a storage record.

        Accepts both the snake_case field names and the camelCase
        `sourceUrl` key used by the browser-era storage format.
        """
        return cls(
            name=record.get("name"),
            price=record.get("price"),
            source_url=record.get("source_url", record.get("sourceUrl")),
        )

    def to_record(self) -> dict:
        """Convert to the storage record format."""
        return {
            "name": self.name,
            "price": float(self.price),
            "sourceUrl": self.source_url,
        }

    @property
    def has_name(self) -> bool:
        return bool(self.name.strip())

    @property
    def display_price(self) -> str:
        return format_price(self.price)


class ReorderRow(BaseModel):
    """
    One row of a UI-reported permutation.

    The row carries its current field values (the user may have edited them
    since the last render) plus the Store key it was rendered from, if any.
    """

    key: Optional[str] = Field(
        default=None,
        description="Store key the row was rendered from"
    )
    name: Any = None
    price: Any = None
    source_url: Any = None

    def to_item(self) -> Item:
        return Item(name=self.name, price=self.price, source_url=self.source_url)


# =============================================================================
# CONSOLE MODELS
# =============================================================================

class Quote(BaseModel):
    """
    Result of a cost calculation, plus the display policy for it.
    """
    model_config = ConfigDict(frozen=True)

    breakdown: str = ""
    total: int = 0
    source_url: str = ""
    mode: DisplayMode = DisplayMode.BLANK

    @property
    def show_breakdown(self) -> bool:
        return self.mode in (DisplayMode.PRICED, DisplayMode.PRICED_WITH_LINK)

    @property
    def show_link(self) -> bool:
        return self.mode in (DisplayMode.PRICED_WITH_LINK, DisplayMode.LINK_ONLY)

    @property
    def clipboard_text(self) -> Optional[str]:
        """Text to copy for the total, None when there is nothing to copy."""
        if not self.show_breakdown or self.total == 0:
            return None
        return str(self.total)


class MatchResult(BaseModel):
    """
    Ordered search matches for one query.

    Entries are (store key, item) pairs in Store order.
    """
    model_config = ConfigDict(frozen=True)

    query: str = ""
    state: MatchState = MatchState.HIDDEN
    entries: tuple[tuple[str, Item], ...] = ()

    @property
    def items(self) -> list[Item]:
        return [item for _, item in self.entries]

    @property
    def keys(self) -> list[str]:
        return [key for key, _ in self.entries]

    @property
    def selectable_count(self) -> int:
        """Number of selectable rows (the placeholder is never selectable)."""
        return len(self.entries) if self.state == MatchState.MATCHES else 0


# =============================================================================
# VALIDATION MODELS
# =============================================================================

class ValidationIssue(BaseModel):
    """A single validation issue found."""

    index: int = Field(
        ...,
        ge=0,
        description="Position of the item with the issue"
    )
    field: str = Field(
        ...,
        description="Field with the issue"
    )
    issue_type: str = Field(
        ...,
        description="Type of issue (e.g., 'missing', 'invalid_url')"
    )
    message: str = Field(
        ...,
        description="Human-readable description of the issue"
    )
    severity: str = Field(
        ...,
        pattern="^(error|warning|info)$",
        description="Issue severity"
    )
    suggested_fix: Optional[str] = Field(
        default=None,
        description="Suggested fix if available"
    )


class ValidationResult(BaseModel):
    """
    Result of validating the Store contents before a save.

    Errors block the save; warnings are shown but never block.
    """

    validated_at: datetime = Field(
        default_factory=datetime.utcnow
    )
    item_count: int = Field(
        ...,
        ge=0,
        description="Number of items validated"
    )
    issues: list[ValidationIssue] = Field(
        default_factory=list,
        description="All validation issues found"
    )

    @property
    def has_errors(self) -> bool:
        """Check if there are any error-level issues."""
        return any(issue.severity == "error" for issue in self.issues)

    @property
    def is_valid(self) -> bool:
        return not self.has_errors

    @property
    def error_count(self) -> int:
        """Count error-level issues."""
        return sum(1 for issue in self.issues if issue.severity == "error")

    @property
    def warnings(self) -> list[str]:
        return [issue.message for issue in self.issues if issue.severity == "warning"]

    def issues_for(self, index: int) -> list[ValidationIssue]:
        return [issue for issue in self.issues if issue.index == index]


class SaveOutcome(BaseModel):
    """Outcome of one autosave cycle."""

    status: SaveStatus
    item_count: int = Field(default=0, ge=0)
    finished_at: datetime = Field(
        default_factory=datetime.utcnow
    )
    validation: Optional[ValidationResult] = None
    error_message: Optional[str] = None

    @property
    def saved(self) -> bool:
        return self.status == SaveStatus.SAVED
