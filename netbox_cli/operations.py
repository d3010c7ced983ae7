"""
Command bodies: one Netbox call per command, rendered to the console.

Each function returns the process exit status.
"""

import logging
from typing import Any, Dict, List, Optional

from .endpoints import CONNECTED_DEVICE
from .models import Endpoint
from .netbox_client import ConflictError, NetBoxClient, NotFoundError
from .pager import Pager
from .renderer import Renderer

logger = logging.getLogger(__name__)


def _announce(client: NetBoxClient, renderer: Renderer, method: str, path: str, check_ssl: bool) -> None:
    renderer.request_line(method, client.url_for(path))
    if check_ssl:
        renderer.ssl_status(client.base_url, client.check_ssl())


def _require_writable(endpoint: Endpoint) -> None:
    if endpoint.read_only:
        raise RuntimeError(f"{endpoint.path} is read-only")


def _as_objects(result: Any) -> List[Dict[str, Any]]:
    if isinstance(result, dict):
        return [result]
    if isinstance(result, list):
        return [r for r in result if isinstance(r, dict)]
    return []


def _bulk_ids(payload: Any) -> List[Dict[str, Any]]:
    """Bulk write payloads are lists of objects that carry an integer `id`."""
    if isinstance(payload, dict):
        payload = [payload]
    if not isinstance(payload, list) or not payload:
        raise RuntimeError("Bulk payload must be a non-empty JSON list")
    objects = []
    for item in payload:
        if isinstance(item, int) and not isinstance(item, bool):
            item = {"id": item}
        if not isinstance(item, dict) or not isinstance(item.get("id"), int):
            raise RuntimeError(f"Every bulk item needs an integer 'id', got {item!r}")
        objects.append(item)
    return objects


def list_objects(
    client: NetBoxClient,
    renderer: Renderer,
    endpoint: Endpoint,
    *,
    params: Optional[dict] = None,
    pager: Optional[Pager] = None,
    check_ssl: bool = False,
) -> int:
    _announce(client, renderer, "GET", endpoint.path, check_ssl)
    page = client.get_page(endpoint.path, params=params)
    pager = pager or Pager(client, renderer)
    pager.run(endpoint, page)
    return 0


def show_object(
    client: NetBoxClient,
    renderer: Renderer,
    endpoint: Endpoint,
    object_id: int,
    *,
    check_ssl: bool = False,
) -> int:
    _announce(client, renderer, "GET", endpoint.object_path(object_id), check_ssl)
    try:
        obj = client.get_object(endpoint.path, object_id)
    except NotFoundError:
        logger.warning("%s %s not found", endpoint.singular, object_id)
        renderer.not_found(f"{endpoint.singular} ID {object_id}")
        return 1
    renderer.render_object(endpoint, obj)
    return 0


def query_objects(
    client: NetBoxClient,
    renderer: Renderer,
    endpoint: Endpoint,
    query: str,
    *,
    params: Optional[dict] = None,
    pager: Optional[Pager] = None,
    check_ssl: bool = False,
) -> int:
    _announce(client, renderer, "GET", endpoint.path, check_ssl)
    page = client.query(endpoint.path, query, params=params)
    pager = pager or Pager(client, renderer)
    pager.run(endpoint, page)
    return 0


def lookup_serial(
    client: NetBoxClient,
    renderer: Renderer,
    serial: str,
    *,
    check_ssl: bool = False,
) -> int:
    """Show ID, site and primary IP of the devices carrying a serial number."""
    _announce(client, renderer, "GET", "/api/dcim/devices/", check_ssl)
    page = client.get_by_serial(serial)
    if not page.results:
        renderer.nothing_found("Device", "No device entries found on server with serial number:", serial)
        return 1
    for device in page.results:
        renderer.device_summary(device)
    return 0


def show_connected_device(
    client: NetBoxClient,
    renderer: Renderer,
    peer_device: str,
    peer_interface: str,
    *,
    check_ssl: bool = False,
) -> int:
    _announce(client, renderer, "GET", CONNECTED_DEVICE.path, check_ssl)
    try:
        devices = client.get_connected_device(peer_device, peer_interface)
    except NotFoundError:
        renderer.not_found(f"{peer_device} {peer_interface}")
        return 1
    if not devices:
        renderer.empty(CONNECTED_DEVICE)
        return 1
    renderer.render_results(CONNECTED_DEVICE, devices)
    return 0


def patch_objects(
    client: NetBoxClient,
    renderer: Renderer,
    endpoint: Endpoint,
    payload: Any,
    *,
    object_id: Optional[int] = None,
    check_ssl: bool = False,
) -> int:
    """PATCH one object (object_id given) or a list of objects in bulk."""
    _require_writable(endpoint)

    if object_id is not None:
        if not isinstance(payload, dict):
            raise RuntimeError("Payload for a single object must be a JSON object")
        path = endpoint.object_path(object_id)
        _announce(client, renderer, "PATCH", path, check_ssl)
        try:
            result = client.patch_object(endpoint.path, object_id, payload)
        except NotFoundError:
            renderer.not_found(f"{endpoint.singular} ID {object_id}")
            return 1
        logger.info("Patched %s %s", endpoint.singular, object_id)
        renderer.success("Successfully patched ID: ", str(object_id))
    else:
        objects = _bulk_ids(payload)
        _announce(client, renderer, "PATCH", endpoint.path, check_ssl)
        try:
            result = client.patch(endpoint.path, objects)
        except NotFoundError:
            renderer.not_found(", ".join(str(o["id"]) for o in objects))
            return 1
        logger.info("Patched %s %s object(s)", len(objects), endpoint.path)
        renderer.success("Successfully patched data for: ", client.url_for(endpoint.path))

    renderer.render_results(endpoint, _as_objects(result))
    return 0


def create_objects(
    client: NetBoxClient,
    renderer: Renderer,
    endpoint: Endpoint,
    payload: Any,
    *,
    check_ssl: bool = False,
) -> int:
    _require_writable(endpoint)
    if not isinstance(payload, (dict, list)) or not payload:
        raise RuntimeError("Payload must be a JSON object or a non-empty list of objects")

    _announce(client, renderer, "POST", endpoint.path, check_ssl)
    result = client.post(endpoint.path, payload)
    created = _as_objects(result)
    logger.info("Created %s %s object(s)", len(created), endpoint.path)
    renderer.success("Successfully posted data for: ", client.url_for(endpoint.path))
    renderer.render_results(endpoint, created)
    return 0


def delete_objects(
    client: NetBoxClient,
    renderer: Renderer,
    endpoint: Endpoint,
    *,
    object_id: Optional[int] = None,
    payload: Any = None,
    check_ssl: bool = False,
) -> int:
    """DELETE one object (object_id given) or a list of objects in bulk."""
    _require_writable(endpoint)
    if object_id is None and payload is None:
        raise RuntimeError("Either an object ID or a bulk payload is required")

    if object_id is not None:
        subject = str(object_id)
    else:
        objects = _bulk_ids(payload)
        subject = ", ".join(str(o["id"]) for o in objects)

    try:
        if object_id is not None:
            _announce(client, renderer, "DELETE", endpoint.object_path(object_id), check_ssl)
            client.delete_object(endpoint.path, object_id)
        else:
            _announce(client, renderer, "DELETE", endpoint.path, check_ssl)
            client.delete(endpoint.path, objects)
    except NotFoundError:
        renderer.not_found()
        return 1
    except ConflictError as exc:
        logger.error("Delete on %s refused: %s", endpoint.path, exc.detail)
        renderer.conflict(subject, exc.status_code)
        return 1

    logger.info("Deleted %s %s", endpoint.singular, subject)
    renderer.success("Successfully deleted: ", subject)
    return 0
