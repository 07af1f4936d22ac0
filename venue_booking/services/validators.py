"""
Field error collection shared by the mutation services
"""

from datetime import date
from typing import Any, Dict, List, Optional

from venue_booking.core.exceptions import ValidationFailedError


class FieldErrors:
    """Accumulates errors per field so all of them are reported in one response"""

    def __init__(self):
        self._errors: Dict[str, List[str]] = {}

    def add(self, field: str, message: str) -> None:
        self._errors.setdefault(field, []).append(message)

    def has(self, field: str) -> bool:
        return field in self._errors

    def __bool__(self) -> bool:
        return bool(self._errors)

    def raise_if_any(self, submitted: Optional[Dict[str, Any]] = None) -> None:
        if self._errors:
            raise ValidationFailedError(dict(self._errors), submitted=submitted)

    def require_text(self, field: str, value: Optional[str], label: str, max_length: int) -> None:
        if value is None or not value.strip():
            self.add(field, f"{label} is required.")
        elif len(value) > max_length:
            self.add(field, f"{label} cannot exceed {max_length} characters.")

    def optional_text(self, field: str, value: Optional[str], label: str, max_length: int) -> None:
        if value is not None and len(value) > max_length:
            self.add(field, f"{label} cannot exceed {max_length} characters.")

    def not_in_past(self, field: str, value: Optional[date], label: str) -> None:
        if value is None:
            self.add(field, f"{label} is required.")
        elif value < date.today():
            self.add(field, f"{label} cannot be in the past.")

    def selected(self, field: str, value: Optional[int], label: str) -> bool:
        """Ids of 0 or less mean nothing was picked"""
        if not value or value <= 0:
            self.add(field, f"Please select {label}.")
            return False
        return True
