"""Click entrypoint: one command per Netbox endpoint and verb."""

import json
import logging
import os
from pathlib import Path
from typing import Any, Callable, Dict, Optional, Tuple

import click
import requests
from click.shell_completion import get_completion_class

from . import __version__, operations
from .config import DEFAULT_ENVIRONMENT, DEFAULT_LOG_LEVEL, LOG_LEVELS, Settings, load_settings
from .endpoints import APPS, endpoints_for
from .logging_config import configure_logging
from .models import Endpoint
from .netbox_client import NetBoxClient
from .pager import Pager
from .renderer import Renderer

logger = logging.getLogger(__name__)

PROG_NAME = "netbox-cli"
BANNER = "Netbox Automation Tools - Netbox DCIM APIs."

APP_HELP = {
    "dcim": "Netbox DCIM Management APIs.",
    "circuits": "Netbox Circuit Management APIs.",
    "core": "Netbox Core Management APIs.",
}


class AppContext:
    """Per-invocation state; settings and client are built on first use."""

    def __init__(
        self,
        environment: str = DEFAULT_ENVIRONMENT,
        config_file: Optional[str] = None,
        log_level: Optional[str] = None,
        log_dir: Optional[Path] = None,
        check_ssl: bool = False,
        *,
        settings: Optional[Settings] = None,
        client: Optional[NetBoxClient] = None,
        renderer: Optional[Renderer] = None,
    ):
        self.environment = environment
        self.config_file = config_file
        self.log_level = log_level
        self.log_dir = log_dir
        self.check_ssl = check_ssl
        self._settings = settings
        self._client = client
        self.renderer = renderer or Renderer()

    @property
    def settings(self) -> Settings:
        if self._settings is None:
            self._settings = load_settings(self.environment, self.config_file)
            # --log-level and --log-dir on the command line win over the config file
            configure_logging(
                self.log_level or self._settings.log_level,
                self.log_dir or self._settings.log_dir,
            )
            logger.info("Using Netbox %s (%s)", self._settings.netbox_url, self._settings.environment)
        return self._settings

    @property
    def client(self) -> NetBoxClient:
        if self._client is None:
            s = self.settings
            self._client = NetBoxClient(
                base_url=s.netbox_url,
                token=s.netbox_api_token,
                timeout=s.netbox_timeout,
                verify_ssl=s.verify_ssl,
                auth_scheme=s.auth_scheme,
            )
        return self._client

    def pager(self, auto: bool = False) -> Pager:
        return Pager(self.client, self.renderer, auto=auto)


class JsonData(click.ParamType):
    """Inline JSON, or @path to a JSON file."""

    name = "json"

    def convert(self, value, param, ctx):
        if not isinstance(value, str):
            return value
        text = value
        if value.startswith("@"):
            try:
                text = Path(value[1:]).expanduser().read_text(encoding="utf-8")
            except (OSError, UnicodeDecodeError) as exc:
                self.fail(f"cannot read {value[1:]!r}: {exc}", param, ctx)
        try:
            return json.loads(text)
        except json.JSONDecodeError as exc:
            self.fail(f"invalid JSON: {exc}", param, ctx)


JSON_DATA = JsonData()


def _parse_filters(filters: Tuple[str, ...]) -> Dict[str, Any]:
    params: Dict[str, Any] = {}
    for item in filters:
        key, sep, value = item.partition("=")
        if not sep or not key.strip():
            raise click.BadParameter(f"expected KEY=VALUE, got {item!r}", param_hint="--filter")
        key = key.strip()
        if key in params:
            existing = params[key]
            params[key] = existing + [value] if isinstance(existing, list) else [existing, value]
        else:
            params[key] = value
    return params


def _startup_log_level() -> str:
    """LOG_LEVEL before settings are loaded; unknown names fall back to WARNING."""
    level = os.getenv("LOG_LEVEL", DEFAULT_LOG_LEVEL).strip().upper()
    return level if level in LOG_LEVELS else DEFAULT_LOG_LEVEL


def _run(func: Callable[[], int]) -> None:
    """Run a command body; map failures to exit status 1."""
    try:
        status = func()
    except (click.Abort, click.exceptions.Exit):
        # both subclass RuntimeError
        raise
    except (RuntimeError, requests.RequestException) as exc:
        logger.error("%s", exc)
        raise click.ClickException(str(exc)) from exc
    if status:
        click.get_current_context().exit(status)


def _endpoint_group(endpoint: Endpoint) -> click.Group:
    plural = endpoint.plural.lower()
    singular = endpoint.singular.lower()

    @click.group(name=endpoint.slug, help=f"{endpoint.plural} ({endpoint.path})")
    def group():
        pass

    @group.command("list", help=f"GET a list of {singular} objects")
    @click.option("--limit", type=click.IntRange(min=1), help="Page size (default: netbox.page_size)")
    @click.option("--all", "fetch_all", is_flag=True, help="Show every page without prompting")
    @click.option("--filter", "filters", multiple=True, metavar="KEY=VALUE", help="Netbox filter, repeatable")
    @click.pass_obj
    def list_cmd(app: AppContext, limit, fetch_all, filters):
        params = _parse_filters(filters)

        def body():
            if limit:
                params["limit"] = limit
            else:
                params.setdefault("limit", app.settings.page_size)
            return operations.list_objects(
                app.client, app.renderer, endpoint,
                params=params, pager=app.pager(auto=fetch_all), check_ssl=app.check_ssl,
            )

        _run(body)

    @group.command("get", help=f"GET a {singular} object by ID")
    @click.option("--id", "object_id", type=int, required=True, help=f"ID of the {singular}")
    @click.pass_obj
    def get_cmd(app: AppContext, object_id):
        _run(lambda: operations.show_object(
            app.client, app.renderer, endpoint, object_id, check_ssl=app.check_ssl,
        ))

    @group.command("query", help=f"GET {singular} object(s) by string query")
    @click.option("-q", "--query", "query", required=True, help="string query of the objects you want to get")
    @click.option("--all", "fetch_all", is_flag=True, help="Show every page without prompting")
    @click.pass_obj
    def query_cmd(app: AppContext, query, fetch_all):
        _run(lambda: operations.query_objects(
            app.client, app.renderer, endpoint, query,
            pager=app.pager(auto=fetch_all), check_ssl=app.check_ssl,
        ))

    if endpoint.read_only:
        return group

    @group.command("patch", help=f"PATCH a {singular} object by ID, or a list of {plural} in bulk")
    @click.option("--id", "object_id", type=int, help=f"ID of the {singular} to patch")
    @click.option("--data", type=JSON_DATA, required=True, help="JSON data to be patched (or @file)")
    @click.pass_obj
    def patch_cmd(app: AppContext, object_id, data):
        _run(lambda: operations.patch_objects(
            app.client, app.renderer, endpoint, data, object_id=object_id, check_ssl=app.check_ssl,
        ))

    @group.command("create", help=f"POST one or more {singular} objects")
    @click.option("--data", type=JSON_DATA, required=True, help="JSON data to be posted (or @file)")
    @click.pass_obj
    def create_cmd(app: AppContext, data):
        _run(lambda: operations.create_objects(
            app.client, app.renderer, endpoint, data, check_ssl=app.check_ssl,
        ))

    @group.command("delete", help=f"DELETE a {singular} object by ID, or a list of {plural} in bulk")
    @click.option("--id", "object_id", type=int, help=f"ID of the {singular} to delete")
    @click.option("--data", type=JSON_DATA, help="JSON list of IDs or {\"id\": ...} objects (or @file)")
    @click.pass_obj
    def delete_cmd(app: AppContext, object_id, data):
        if (object_id is None) == (data is None):
            raise click.UsageError("Pass exactly one of --id or --data")
        _run(lambda: operations.delete_objects(
            app.client, app.renderer, endpoint,
            object_id=object_id, payload=data, check_ssl=app.check_ssl,
        ))

    return group


@click.group(context_settings={"help_option_names": ["-h", "--help"]}, help=BANNER)
@click.version_option(version=__version__, prog_name=PROG_NAME)
@click.option(
    "--env",
    "environment",
    default=DEFAULT_ENVIRONMENT,
    show_default=True,
    envvar="NETBOX_ENV",
    help="Environment ('development' or 'production')",
)
@click.option("--config", "config_file", type=click.Path(dir_okay=False), help="Path to netbox_config.yaml")
@click.option("--log-level", type=click.Choice(LOG_LEVELS, case_sensitive=False), help="Override log level")
@click.option("--log-dir", type=click.Path(file_okay=False, path_type=Path), help="Also log to a file here")
@click.option("--check-ssl/--no-check-ssl", default=False, help="Validate the server certificate first")
@click.pass_context
def cli(ctx: click.Context, environment, config_file, log_level, log_dir, check_ssl):
    if isinstance(ctx.obj, AppContext):
        return
    configure_logging(log_level or _startup_log_level(), log_dir)
    ctx.obj = AppContext(
        environment=environment,
        config_file=config_file,
        log_level=log_level,
        log_dir=log_dir,
        check_ssl=check_ssl,
    )


def _app_group(app_name: str) -> click.Group:
    group = click.Group(name=app_name, help=APP_HELP[app_name])
    for endpoint in endpoints_for(app_name):
        group.add_command(_endpoint_group(endpoint))
    return group


dcim = _app_group("dcim")


@dcim.commands["devices"].command("serial", help="GET a device's ID by serial number")
@click.option("-s", "--serial", required=True, help="serial number of the device")
@click.pass_obj
def serial_cmd(app: AppContext, serial):
    _run(lambda: operations.lookup_serial(app.client, app.renderer, serial, check_ssl=app.check_ssl))


@dcim.command("connected-device", help="GET the device connected to a peer device interface")
@click.option("--peer-device", required=True, help="name of the peer device")
@click.option("--peer-interface", required=True, help="name of the peer interface")
@click.pass_obj
def connected_device_cmd(app: AppContext, peer_device, peer_interface):
    _run(lambda: operations.show_connected_device(
        app.client, app.renderer, peer_device, peer_interface, check_ssl=app.check_ssl,
    ))


cli.add_command(dcim)
for _name in APPS:
    if _name != "dcim":
        cli.add_command(_app_group(_name))


@cli.command(help=f"Version information for {PROG_NAME}")
def version():
    click.echo(f"{BANNER}\nVersion: {__version__}")


@cli.command(help="Generate a shell completion script")
@click.argument("shell", type=click.Choice(["bash", "zsh", "fish"]))
@click.pass_context
def completion(ctx: click.Context, shell):
    root = ctx.find_root()
    prog_name = root.info_name or PROG_NAME
    complete_var = f"_{prog_name.replace('-', '_').replace('.', '_').upper()}_COMPLETE"
    comp_cls = get_completion_class(shell)
    click.echo(comp_cls(root.command, {}, prog_name, complete_var).source())


def main() -> None:
    cli(prog_name=PROG_NAME)


