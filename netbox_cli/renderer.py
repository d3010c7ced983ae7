"""
Console rendering of Netbox objects.

Every field of a decoded JSON object is printed as `Label: value`, nested
objects are indented below their label, and zero values are replaced by a
red "No <label> entry found for <object>" placeholder.
"""

from typing import Any, Dict, Iterable, Optional

from rich.console import Console
from rich.text import Text

from .models import Endpoint

LABEL_STYLE = "cyan"
VALUE_STYLE = "yellow"
MISSING_STYLE = "red"
BANNER_STYLE = "bright_green"

INDENT = "  "
FIELD_INDENT = INDENT * 2

_ACRONYMS = {
    "asn": "ASN",
    "cid": "CID",
    "id": "ID",
    "ip": "IP",
    "ip4": "IPv4",
    "ip6": "IPv6",
    "lag": "LAG",
    "mac": "MAC",
    "mtu": "MTU",
    "oob": "OOB",
    "poe": "PoE",
    "rf": "RF",
    "tx": "TX",
    "url": "URL",
    "vc": "VC",
    "vdc": "VDC",
    "vrf": "VRF",
    "wwn": "WWN",
}

_VERBS = {
    "GET": "Getting",
    "PATCH": "Patching",
    "POST": "Posting",
    "DELETE": "Deleting",
}


def humanize(key: str) -> str:
    """`last_updated` -> `Last Updated`, `primary_ip4` -> `Primary IPv4`, `_depth` -> `Depth`."""
    words = [w for w in key.strip("_").split("_") if w]
    if not words:
        return key
    return " ".join(_ACRONYMS.get(w.lower(), w.capitalize()) for w in words)


def is_zero(value: Any) -> bool:
    """Zero value of a JSON field. Booleans are never zero: False is a real answer."""
    if isinstance(value, bool):
        return False
    if value is None or value == "":
        return True
    if isinstance(value, (int, float)):
        return value == 0
    if isinstance(value, (list, dict)):
        return not value
    return False


def display_name(obj: Dict[str, Any]) -> str:
    for key in ("display", "name"):
        value = obj.get(key)
        if isinstance(value, str) and value:
            return value
    if obj.get("id") is not None:
        return f"#{obj['id']}"
    return "object"


def _scalar(value: Any) -> str:
    if isinstance(value, bool):
        return "true" if value else "false"
    return str(value)


class Renderer:
    """Colourised text output for Netbox responses."""

    def __init__(self, console: Optional[Console] = None):
        self.console = console or Console(highlight=False)

    def _print(self, *parts) -> None:
        self.console.print(Text.assemble(*parts), soft_wrap=True)

    def _field(self, indent: str, label: str, value: str) -> None:
        self._print((f"{indent}{label}: ", LABEL_STYLE), (value, VALUE_STYLE))

    def _missing(self, indent: str, label: str, owner: str) -> None:
        self._print(
            (f"{indent}{label}: ", LABEL_STYLE),
            (f"No {label.lower()} entry found for ", MISSING_STYLE),
            (owner, VALUE_STYLE),
        )

    def _section(self, indent: str, label: str) -> None:
        self._print((f"{indent}{label}: ", LABEL_STYLE))

    # -- objects ---------------------------------------------------------

    def render_fields(self, obj: Dict[str, Any], owner: str, indent: str = FIELD_INDENT) -> None:
        """Print every field of `obj` in response order."""
        for key, value in obj.items():
            label = humanize(key)

            if is_zero(value):
                self._missing(indent, label, owner)
            elif isinstance(value, dict):
                self._section(indent, label)
                self.render_fields(value, owner, indent + INDENT)
            elif isinstance(value, list):
                if all(isinstance(v, dict) for v in value):
                    for item in value:
                        self._section(indent, label)
                        self.render_fields(item, owner, indent + INDENT)
                else:
                    self._field(indent, label, ", ".join(_scalar(v) for v in value))
            else:
                self._field(indent, label, _scalar(value))

    def render_object(self, endpoint: Endpoint, obj: Dict[str, Any]) -> None:
        owner = display_name(obj)
        title = f"{INDENT * 2}{endpoint.singular}: "
        rule = "=" * (len(title) + len(owner) + 2)
        self.console.print()
        self._print((f"{INDENT}{rule}", LABEL_STYLE))
        self._print((title, LABEL_STYLE), (owner, VALUE_STYLE))
        self._print((f"{INDENT}{rule}", LABEL_STYLE))
        self.render_fields(obj, owner)

    def render_results(self, endpoint: Endpoint, results: Iterable[Dict[str, Any]]) -> None:
        for obj in results:
            self.render_object(endpoint, obj)

    def page_header(self, endpoint: Endpoint, count: int) -> None:
        self.console.print()
        self._print((f"{INDENT}Total {endpoint.plural}: ", LABEL_STYLE), (str(count), VALUE_STYLE))

    def empty(self, endpoint: Endpoint) -> None:
        self._print(
            (f"{INDENT}Total {endpoint.plural}: ", LABEL_STYLE),
            (f"No {endpoint.plural.lower()} found on server. Exiting...", MISSING_STYLE),
        )

    def all_displayed(self, endpoint: Endpoint) -> None:
        message = f"{INDENT * 2}All Netbox {endpoint.plural.lower()} objects have been successfully displayed..."
        stars = "*" * len(message)
        self.console.print()
        self._print((f"{INDENT}{stars}", BANNER_STYLE))
        self._print((message, LABEL_STYLE))
        self._print((f"{INDENT}{stars}", BANNER_STYLE))

    def device_summary(self, device: Dict[str, Any]) -> None:
        """Compact device view used by the serial number lookup."""
        owner = display_name(device)
        site = device.get("site") or {}
        primary_ip = device.get("primary_ip") or {}
        title = f"{INDENT * 2}Device Name: "
        rule = "=" * (len(title) + len(owner) + 2)
        self.console.print()
        self._print((f"{INDENT}{rule}", LABEL_STYLE))
        self._print((title, LABEL_STYLE), (owner, VALUE_STYLE))
        self._print((f"{INDENT}{rule}", LABEL_STYLE))
        for label, value in (
            ("Device ID", device.get("id")),
            ("Site ID", site.get("id")),
            ("Site Display", site.get("display")),
            ("Primary IP", primary_ip.get("address")),
        ):
            if is_zero(value):
                self._missing(FIELD_INDENT, label, owner)
            else:
                self._field(FIELD_INDENT, label, _scalar(value))

    # -- status lines ----------------------------------------------------

    def request_line(self, method: str, url: str) -> None:
        verb = _VERBS.get(method.upper(), method.title())
        self.console.print()
        self._print((f"{INDENT}{verb} Netbox API objects from {url}", VALUE_STYLE))

    def ssl_status(self, url: str, error: Optional[str]) -> None:
        if error:
            self._print((f"{INDENT}SSL certificate is not valid: ", MISSING_STYLE), (error, VALUE_STYLE))
        else:
            self._print((f"{INDENT}SSL certificate is valid for: ", LABEL_STYLE), (url, VALUE_STYLE))

    def continue_prompt(self, endpoint: Endpoint) -> str:
        return (
            f"{INDENT * 2}Do you want to continue to the next page of {endpoint.plural.lower()} objects? "
            "['Y' or 'yes'] or ['n' or 'no']"
        )

    def invalid_input(self) -> None:
        self._print(("Invalid input, Please type ['Y' or 'yes'] or ['n' or 'no'] ", LABEL_STYLE))

    def exiting(self) -> None:
        self._print((f"{INDENT * 2}Exiting the netbox-cli application...", "bright_magenta"))

    def success(self, message: str, subject: str = "") -> None:
        self._print((f"{INDENT}{message}", "green"), (subject, VALUE_STYLE))

    def not_found(self, what: str = "") -> None:
        suffix = f": {what}" if what else "."
        self._print((f"{INDENT}No such object on Netbox server{suffix}", "blue"))

    def conflict(self, object_id: Any, status_code: int) -> None:
        self._print(
            (f"{INDENT}Dependency Error: there is a conflict with ID: ", MISSING_STYLE),
            (f"{object_id} - HTTP Status Code: {status_code}", VALUE_STYLE),
        )

    def nothing_found(self, label: str, message: str, subject: str) -> None:
        self._print(
            (f"{INDENT}{label}: ", LABEL_STYLE),
            (f"{message} ", MISSING_STYLE),
            (subject, VALUE_STYLE),
            (" Exiting...", MISSING_STYLE),
        )
