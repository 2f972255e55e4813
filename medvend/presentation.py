"""
Presentation helpers: page view state and display formatting.
"""

from datetime import datetime
from typing import Any, Dict, List, Optional, Union

from medvend.config import PLACEHOLDER
from medvend.errors import PortalError

MONTH_NAMES = (
    "January", "February", "March", "April", "May", "June", "July",
    "August", "September", "October", "November", "December",
)


class PageView:
    """What one page shows: element texts, visibility, form values and buttons.

    Loaders write into it the way page scripts write into the DOM. Once
    ``redirect`` is called the view stands for a full navigation and nothing
    else on it is rendered.
    """

    def __init__(self, page: str):
        self.page = page
        self.texts: Dict[str, str] = {}
        self.visible: Dict[str, bool] = {}
        self.values: Dict[str, str] = {}
        self.buttons: Dict[str, Dict[str, Any]] = {}
        self.errors: List[PortalError] = []
        self.redirect_to: Optional[str] = None

    # ── Element helpers ──────────────────────────────────────────────

    def set_text(self, element_id: str, text: str):
        self.texts[element_id] = text

    def show(self, element_id: str):
        self.visible[element_id] = True

    def hide(self, element_id: str):
        self.visible[element_id] = False

    def is_visible(self, element_id: str) -> bool:
        return self.visible.get(element_id, False)

    def show_error(self, element_id: str, message: str, error: Optional[PortalError] = None):
        self.set_text(element_id, message)
        self.show(element_id)
        if error is not None:
            self.errors.append(error)

    def show_success(self, element_id: str, message: str):
        self.set_text(element_id, message)
        self.show(element_id)

    def set_value(self, element_id: str, value: str):
        self.values[element_id] = value

    def set_button(self, element_id: str, label: str, disabled: bool):
        self.buttons[element_id] = {"label": label, "disabled": disabled}

    def redirect(self, page: str):
        self.redirect_to = page

    # ── Output ───────────────────────────────────────────────────────

    @property
    def status_code(self) -> int:
        return self.errors[0].status_code if self.errors else 200

    def to_dict(self) -> Dict[str, Any]:
        if self.redirect_to:
            return {"page": self.page, "redirect": self.redirect_to}
        return {
            "page": self.page,
            "text": self.texts,
            "visible": self.visible,
            "values": self.values,
            "buttons": self.buttons,
        }


def format_date(value: datetime) -> str:
    """Format a date as e.g. "17 February 2024"."""
    return f"{value.day} {MONTH_NAMES[value.month - 1]} {value.year}"


def format_medicines(medicines: Union[List[str], str, None]) -> str:
    """Render stored medicines: lists joined with ", ", bare strings verbatim."""
    if isinstance(medicines, (list, tuple)):
        return ", ".join(medicines) or PLACEHOLDER
    return medicines or PLACEHOLDER


def or_placeholder(value: Any) -> str:
    if value is None or value == "":
        return PLACEHOLDER
    return str(value)
