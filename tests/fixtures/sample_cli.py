"""Sample click application used by the clibridge test-suite.

Executed as a child process by the invocation tests, and imported by the
compiler tests to build a command tree.
"""

from __future__ import annotations

import json
import sys
import time

import click

from clibridge.annotations import annotate
from clibridge.params import Duration, IPAddress, JSONValue, KeyValue


@click.group(name="sample")
@click.option("--verbose", "-v", is_flag=True, help="Enable verbose output")
@click.pass_context
def cli(ctx: click.Context, verbose: bool) -> None:
    """Sample application."""
    ctx.obj = {"verbose": verbose}


@cli.command()
@click.option("--upper", is_flag=True, help="Upper-case the output")
@click.option("--repeat", type=int, default=1, help="Times to repeat")
@click.option("--indent", "-i", count=True, help="Indent by one space per use")
@click.argument("words", nargs=-1)
@annotate(read_only=True, title="Echo words")
def echo(upper: bool, repeat: int, indent: int, words: tuple[str, ...]) -> None:
    """Print the given words."""
    text = " " * indent + " ".join(words)
    if upper:
        text = text.upper()
    for _ in range(repeat):
        click.echo(text)


@cli.command()
@click.option("--code", type=int, default=3, help="Exit code to return")
def fail(code: int) -> None:
    """Write to stderr and exit non-zero."""
    click.echo("something went wrong", err=True)
    sys.exit(code)


@cli.command()
@click.option("--seconds", type=float, default=5.0, help="How long to sleep")
def nap(seconds: float) -> None:
    """Sleep for a while."""
    time.sleep(seconds)
    click.echo("awake")


@cli.group()
@click.option("--region", default="us", help="Target region")
@click.pass_context
def env(ctx: click.Context, region: str) -> None:
    """Environment commands."""
    ctx.obj["region"] = region


@env.command()
@click.pass_context
def show(ctx: click.Context) -> None:
    """Show the selected environment."""
    click.echo(f"region={ctx.obj['region']} verbose={ctx.obj['verbose']}")


@env.command(name="set", epilog="sample env set --label team=core NAME")
@click.option("--label", type=KeyValue(), help="Labels to apply")
@click.option("--tag", multiple=True, help="Tags to attach")
@click.option("--payload", type=JSONValue({"type": "object"}), help="Extra payload")
@click.option("--timeout", type=Duration(), default="30s", help="Operation timeout")
@click.option("--bind", type=IPAddress(), help="Bind address")
@click.option("--secret", hidden=True, help="Internal secret")
@click.option("--name", required=True, help="Environment name")
def set_(label, tag, payload, timeout, bind, secret, name) -> None:
    """Update an environment."""
    click.echo(
        json.dumps(
            {
                "name": name,
                "label": label or {},
                "tag": list(tag),
                "payload": payload,
                "timeout": timeout.total_seconds(),
                "bind": str(bind) if bind else None,
            },
            sort_keys=True,
        )
    )


@cli.command(hidden=True)
def internal() -> None:
    """Hidden command."""


@cli.command(deprecated=True)
def legacy() -> None:
    """Deprecated command."""


@cli.group()
def help() -> None:  # noqa: A001
    """Reserved name."""


@help.command()
def topics() -> None:
    """Listed under a reserved segment."""


if __name__ == "__main__":
    cli()
