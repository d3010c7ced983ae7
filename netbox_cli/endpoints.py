"""Registry of the Netbox endpoints exposed as commands."""

from typing import Dict, List, Optional, Tuple

from .models import Endpoint

APPS = ("dcim", "circuits", "core")


def _endpoint(app: str, slug: str, singular: str, plural: Optional[str] = None, read_only: bool = False) -> Endpoint:
    return Endpoint(
        app=app,
        slug=slug,
        singular=singular,
        plural=plural or f"{singular}s",
        read_only=read_only,
    )


_ENDPOINTS: List[Endpoint] = [
    # dcim
    _endpoint("dcim", "cable-terminations", "Cable Termination"),
    _endpoint("dcim", "cables", "Cable"),
    _endpoint("dcim", "console-port-templates", "Console Port Template"),
    _endpoint("dcim", "console-ports", "Console Port"),
    _endpoint("dcim", "console-server-port-templates", "Console Server Port Template"),
    _endpoint("dcim", "console-server-ports", "Console Server Port"),
    _endpoint("dcim", "device-bay-templates", "Device Bay Template"),
    _endpoint("dcim", "device-bays", "Device Bay"),
    _endpoint("dcim", "device-roles", "Device Role"),
    _endpoint("dcim", "device-types", "Device Type"),
    _endpoint("dcim", "devices", "Device"),
    _endpoint("dcim", "front-port-templates", "Front Port Template"),
    _endpoint("dcim", "front-ports", "Front Port"),
    _endpoint("dcim", "interface-templates", "Interface Template"),
    _endpoint("dcim", "interfaces", "Interface"),
    _endpoint("dcim", "inventory-item-roles", "Inventory Item Role"),
    _endpoint("dcim", "inventory-item-templates", "Inventory Item Template"),
    _endpoint("dcim", "inventory-items", "Inventory Item"),
    _endpoint("dcim", "locations", "Location"),
    _endpoint("dcim", "manufacturers", "Manufacturer"),
    _endpoint("dcim", "module-bay-templates", "Module Bay Template"),
    _endpoint("dcim", "module-bays", "Module Bay"),
    _endpoint("dcim", "module-types", "Module Type"),
    _endpoint("dcim", "modules", "Module"),
    _endpoint("dcim", "platforms", "Platform"),
    _endpoint("dcim", "power-feeds", "Power Feed"),
    _endpoint("dcim", "power-outlet-templates", "Power Outlet Template"),
    _endpoint("dcim", "power-outlets", "Power Outlet"),
    _endpoint("dcim", "power-panels", "Power Panel"),
    _endpoint("dcim", "power-port-templates", "Power Port Template"),
    _endpoint("dcim", "power-ports", "Power Port"),
    _endpoint("dcim", "rack-reservations", "Rack Reservation"),
    _endpoint("dcim", "rack-roles", "Rack Role"),
    _endpoint("dcim", "racks", "Rack"),
    _endpoint("dcim", "rear-port-templates", "Rear Port Template"),
    _endpoint("dcim", "rear-ports", "Rear Port"),
    _endpoint("dcim", "regions", "Region"),
    _endpoint("dcim", "site-groups", "Site Group"),
    _endpoint("dcim", "sites", "Site"),
    _endpoint("dcim", "virtual-chassis", "Virtual Chassis", plural="Virtual Chassis"),
    _endpoint("dcim", "virtual-device-contexts", "Virtual Device Context"),
    # circuits
    _endpoint("circuits", "circuit-terminations", "Circuit Termination"),
    _endpoint("circuits", "circuit-types", "Circuit Type"),
    _endpoint("circuits", "circuits", "Circuit"),
    _endpoint("circuits", "provider-accounts", "Provider Account"),
    _endpoint("circuits", "provider-networks", "Provider Network"),
    _endpoint("circuits", "providers", "Provider"),
    # core
    _endpoint("core", "data-files", "Data File", read_only=True),
    _endpoint("core", "data-sources", "Data Source"),
]

# Not a regular list endpoint: it takes peer_device/peer_interface and returns one device.
CONNECTED_DEVICE = _endpoint("dcim", "connected-device", "Connected Device", read_only=True)

REGISTRY: Dict[Tuple[str, str], Endpoint] = {(e.app, e.slug): e for e in _ENDPOINTS}


def get_endpoint(app: str, slug: str) -> Endpoint:
    try:
        return REGISTRY[(app, slug)]
    except KeyError:
        raise KeyError(f"Unknown Netbox endpoint: {app}/{slug}") from None


def endpoints_for(app: str) -> List[Endpoint]:
    return [e for e in _ENDPOINTS if e.app == app]
