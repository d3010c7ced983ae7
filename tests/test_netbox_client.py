"""Tests for NetBoxClient: requests, status mapping and GET retries."""

from unittest.mock import MagicMock, patch

import pytest
import requests
from requests.exceptions import ConnectionError, ReadTimeout

from netbox_cli.netbox_client import (
    ConflictError,
    NetBoxAPIError,
    NetBoxClient,
    NetBoxError,
    NotFoundError,
)

from .conftest import NETBOX_URL, make_page


def _response(status_code=200, body=None, text=""):
    resp = MagicMock()
    resp.status_code = status_code
    resp.reason = "OK" if status_code < 400 else "Error"
    resp.url = f"{NETBOX_URL}/api/"
    resp.text = text
    resp.content = b"" if body is None and not text else b"{}"
    if body is None:
        resp.json.side_effect = ValueError("no json")
    else:
        resp.json.return_value = body
    return resp


@pytest.fixture
def client():
    return NetBoxClient(NETBOX_URL + "/", "secret-token", timeout=15)


class TestClientSetup:
    def test_headers(self, client):
        assert client.base_url == NETBOX_URL
        assert client.session.headers["Authorization"] == "Token secret-token"
        assert client.session.headers["Accept"] == "application/json"

    def test_bearer_scheme(self):
        client = NetBoxClient(NETBOX_URL, "nbt_abc.def", auth_scheme="Bearer")
        assert client.session.headers["Authorization"] == "Bearer nbt_abc.def"

    def test_url_for(self, client):
        assert client.url_for("/api/dcim/sites/") == f"{NETBOX_URL}/api/dcim/sites/"
        nxt = "https://other.example.com/api/dcim/sites/?offset=50"
        assert client.url_for(nxt) == nxt

    def test_insecure_disables_warnings(self):
        with patch("netbox_cli.netbox_client.urllib3.disable_warnings") as mock_disable:
            NetBoxClient(NETBOX_URL, "t", verify_ssl=False)
            mock_disable.assert_called_once()


class TestReads:
    def test_get_page(self, client, cable):
        with patch.object(requests.Session, "request", return_value=_response(body=make_page([cable]))) as mock_req:
            page = client.get_page("/api/dcim/cables/", params={"limit": 50})

        assert page.count == 1
        assert page.results[0]["id"] == 7
        args, kwargs = mock_req.call_args
        assert args == ("GET", f"{NETBOX_URL}/api/dcim/cables/")
        assert kwargs["params"] == {"limit": 50}
        assert kwargs["timeout"] == 15
        assert kwargs["verify"] is True
        assert "json" not in kwargs

    def test_get_page_follows_absolute_next(self, client):
        nxt = f"{NETBOX_URL}/api/dcim/cables/?limit=50&offset=50"
        with patch.object(requests.Session, "request", return_value=_response(body=make_page([]))) as mock_req:
            client.get_page(nxt)
        assert mock_req.call_args.args[1] == nxt

    def test_get_object(self, client, cable):
        with patch.object(requests.Session, "request", return_value=_response(body=cable)) as mock_req:
            assert client.get_object("/api/dcim/cables/", 7) == cable
        assert mock_req.call_args.args[1] == f"{NETBOX_URL}/api/dcim/cables/7/"

    def test_get_object_rejects_non_int(self, client):
        with pytest.raises(RuntimeError):
            client.get_object("/api/dcim/cables/", "7")

    def test_query_and_serial_params(self, client):
        with patch.object(requests.Session, "request", return_value=_response(body=make_page([]))) as mock_req:
            client.query("/api/dcim/sites/", "ams", params={"limit": 5})
            assert mock_req.call_args.kwargs["params"] == {"limit": 5, "q": "ams"}

            client.get_by_serial("FOC123")
            assert mock_req.call_args.args[1] == f"{NETBOX_URL}/api/dcim/devices/"
            assert mock_req.call_args.kwargs["params"] == {"serial": "FOC123"}

    def test_connected_device_single_object(self, client):
        with patch.object(requests.Session, "request", return_value=_response(body={"id": 3, "name": "sw02"})) as mock_req:
            assert client.get_connected_device("sw01", "Gi0/1") == [{"id": 3, "name": "sw02"}]
        assert mock_req.call_args.kwargs["params"] == {"peer_device": "sw01", "peer_interface": "Gi0/1"}

    def test_connected_device_list(self, client):
        with patch.object(requests.Session, "request", return_value=_response(body=[{"id": 3}])):
            assert client.get_connected_device("sw01", "Gi0/1") == [{"id": 3}]


class TestStatusMapping:
    def test_404(self, client):
        with patch.object(requests.Session, "request", return_value=_response(404, {"detail": "Not found."})):
            with pytest.raises(NotFoundError) as exc_info:
                client.get_object("/api/dcim/cables/", 99)
        assert exc_info.value.status_code == 404
        assert exc_info.value.detail == "Not found."

    def test_409(self, client):
        with patch.object(requests.Session, "request", return_value=_response(409, {"detail": "protected"})):
            with pytest.raises(ConflictError):
                client.delete_object("/api/dcim/sites/", 1)

    def test_other_errors(self, client):
        with patch.object(requests.Session, "request", return_value=_response(400, {"name": ["required"]})):
            with pytest.raises(NetBoxAPIError) as exc_info:
                client.post("/api/dcim/sites/", {})
        assert exc_info.value.status_code == 400
        assert "required" in str(exc_info.value)

    def test_errors_are_runtime_errors(self):
        assert issubclass(NetBoxAPIError, NetBoxError)
        assert issubclass(NetBoxError, RuntimeError)

    def test_non_json_success_body(self, client):
        with patch.object(requests.Session, "request", return_value=_response(200, text="<html>")):
            with pytest.raises(NetBoxError):
                client.get_page("/api/dcim/sites/")


class TestWrites:
    def test_patch_object(self, client):
        with patch.object(requests.Session, "request", return_value=_response(body={"id": 3})) as mock_req:
            assert client.patch_object("/api/dcim/sites/", 3, {"description": "x"}) == {"id": 3}
        args, kwargs = mock_req.call_args
        assert args == ("PATCH", f"{NETBOX_URL}/api/dcim/sites/3/")
        assert kwargs["json"] == {"description": "x"}

    def test_post(self, client):
        with patch.object(requests.Session, "request", return_value=_response(201, {"id": 9})) as mock_req:
            assert client.post("/api/dcim/sites/", {"name": "a", "slug": "a"}) == {"id": 9}
        assert mock_req.call_args.args[0] == "POST"

    def test_bulk_delete(self, client):
        with patch.object(requests.Session, "request", return_value=_response(204)) as mock_req:
            assert client.delete("/api/dcim/device-bays/", [{"id": 1}]) is None
        args, kwargs = mock_req.call_args
        assert args == ("DELETE", f"{NETBOX_URL}/api/dcim/device-bays/")
        assert kwargs["json"] == [{"id": 1}]

    def test_writes_are_not_retried(self, client):
        with patch.object(requests.Session, "request", side_effect=ConnectionError("down")) as mock_req:
            with pytest.raises(ConnectionError):
                client.patch("/api/dcim/sites/", [{"id": 1}])
        assert mock_req.call_count == 1


class TestGetRetry:
    @patch("netbox_cli.netbox_client.time.sleep")
    def test_retry_on_timeout_then_success(self, mock_sleep, client):
        ok = _response(body=make_page([]))
        with patch.object(requests.Session, "request", side_effect=[ReadTimeout(), ok]) as mock_req:
            client.get_page("/api/dcim/sites/")

        assert mock_req.call_count == 2
        mock_sleep.assert_called_once_with(1)
        # Later attempts get a longer timeout
        assert mock_req.call_args_list[1].kwargs["timeout"] == 45

    @patch("netbox_cli.netbox_client.time.sleep")
    def test_gives_up_after_max_retries(self, mock_sleep, client):
        with patch.object(requests.Session, "request", side_effect=ConnectionError("down")) as mock_req:
            with pytest.raises(ConnectionError):
                client.get_page("/api/dcim/sites/")

        assert mock_req.call_count == 3
        assert [c.args[0] for c in mock_sleep.call_args_list] == [1, 2]

    @patch("netbox_cli.netbox_client.time.sleep")
    def test_http_errors_are_not_retried(self, mock_sleep, client):
        with patch.object(requests.Session, "request", return_value=_response(500, {"detail": "boom"})) as mock_req:
            with pytest.raises(NetBoxAPIError):
                client.get_page("/api/dcim/sites/")
        assert mock_req.call_count == 1
        mock_sleep.assert_not_called()


class TestCheckSsl:
    def test_valid(self, client):
        with patch.object(requests.Session, "request", return_value=_response(200, {})) as mock_req:
            assert client.check_ssl() is None
        assert mock_req.call_args.kwargs["verify"] is True

    def test_ssl_error(self, client):
        err = requests.exceptions.SSLError("certificate verify failed")
        with patch.object(requests.Session, "request", side_effect=err):
            assert "certificate verify failed" in client.check_ssl()

    def test_bad_status(self, client):
        with patch.object(requests.Session, "request", return_value=_response(503, {})):
            assert client.check_ssl().startswith("bad status: 503")
