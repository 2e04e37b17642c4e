#!/usr/bin/env python3
import asyncio
import json
from typing import Any, Awaitable, Callable, Optional, Sequence

import click

from . import config
from .client import Client
from .errors import GDetectError, ValidationError
from .logging_config import setup_logging
from .models import Result, SubmitOptions, WaitForOptions


def _build_client(url: Optional[str], token: Optional[str], insecure: bool) -> Client:
    if not url:
        raise click.UsageError("missing endpoint, use --url or GDETECT_URL")
    if not token:
        raise click.UsageError("missing token, use --token or GDETECT_TOKEN")
    try:
        return Client(url, token, insecure=insecure)
    except ValidationError as exc:
        raise click.UsageError(str(exc)) from exc


def _run(ctx: click.Context, action: Callable[[Client], Awaitable[Any]]) -> Any:
    settings = ctx.obj
    client = _build_client(settings["url"], settings["token"], settings["insecure"])

    async def runner() -> Any:
        async with client:
            return await action(client)

    try:
        return asyncio.run(runner())
    except GDetectError as exc:
        raise click.ClickException(str(exc)) from exc


def _echo_json(payload: Any) -> None:
    if isinstance(payload, Result):
        payload = payload.model_dump()
    click.echo(json.dumps(payload, indent=2, sort_keys=True))


def submit_options(func):
    func = click.option("--tag", "tags", multiple=True, help="Tag to attach, repeatable.")(func)
    func = click.option("--description", default="", help="Free text description.")(func)
    func = click.option("--no-cache", is_flag=True, default=False, help="Bypass the service result cache.")(func)
    func = click.option("--filename", default=None, help="Override the submitted file name.")(func)
    return func


# ========== CLI with Click ==========

@click.group()
@click.option("--url", envvar="GDETECT_URL", default=config.GDETECT_URL, help="Detect endpoint, e.g. https://gdetect.example.")
@click.option("--token", envvar="GDETECT_TOKEN", default=config.GDETECT_TOKEN, help="API token.")
@click.option("--insecure", is_flag=True, default=config.GDETECT_INSECURE, help="Skip TLS verification.")
@click.option("--verbose", "-v", is_flag=True, default=False, help="Debug logging on stderr.")
@click.pass_context
def cli(ctx, url, token, insecure, verbose):
    """gdetect: submit files to GLIMPS Detect and fetch their results."""
    setup_logging(verbose)
    ctx.obj = {"url": url, "token": token, "insecure": insecure}


@cli.command("submit")
@click.argument("path", type=click.Path(dir_okay=False))
@submit_options
@click.pass_context
def submit_cmd(ctx, path, tags: Sequence[str], description, no_cache, filename):
    """Submit a file and print its uuid."""
    options = SubmitOptions(description=description, tags=tuple(tags), bypass_cache=no_cache, filename=filename)
    uuid = _run(ctx, lambda client: client.submit_file(path, options))
    click.echo(uuid)


@cli.command("get")
@click.argument("uuid")
@click.pass_context
def get_cmd(ctx, uuid):
    """Print the result of a submission."""
    _echo_json(_run(ctx, lambda client: client.get_result_by_uuid(uuid)))


@cli.command("search")
@click.argument("sha256")
@click.pass_context
def search_cmd(ctx, sha256):
    """Print the latest result for a file hash."""
    _echo_json(_run(ctx, lambda client: client.get_result_by_sha256(sha256)))


@cli.command("full")
@click.argument("uuid")
@click.pass_context
def full_cmd(ctx, uuid):
    """Print the full report of a submission."""
    _echo_json(_run(ctx, lambda client: client.get_full_submission_by_uuid(uuid)))


@cli.command("waitfor")
@click.argument("path", type=click.Path(dir_okay=False))
@submit_options
@click.option("--timeout", type=float, default=config.DEFAULT_WAIT_TIMEOUT, show_default=True, help="Max seconds to wait.")
@click.option("--pull-time", type=float, default=config.DEFAULT_PULL_TIME, show_default=True, help="Seconds between polls.")
@click.option("--token-view", is_flag=True, default=False, help="Also print the token view URL.")
@click.option("--expert-view", is_flag=True, default=False, help="Also print the expert view URL.")
@click.pass_context
def waitfor_cmd(ctx, path, tags, description, no_cache, filename, timeout, pull_time, token_view, expert_view):
    """Submit a file, wait for its analysis and print the result."""
    options = WaitForOptions(
        description=description,
        tags=tuple(tags),
        bypass_cache=no_cache,
        filename=filename,
        timeout=timeout,
        pull_time=pull_time,
    )

    async def action(client: Client):
        result = await client.wait_for_file(path, options)
        urls = []
        if token_view:
            urls.append(client.extract_token_view_url(result))
        if expert_view:
            urls.append(client.extract_expert_view_url(result))
        return result, urls

    result, urls = _run(ctx, action)
    _echo_json(result)
    for url in urls:
        click.echo(url)


def main():
    cli(prog_name="gdetect")


if __name__ == "__main__":
    main()
