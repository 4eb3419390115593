"""CLI entry point for aumai-packageseal."""

from __future__ import annotations

import sys

import click

from aumai_packageseal.codec import encode_manifest
from aumai_packageseal.config import PackagingSettings
from aumai_packageseal.errors import (
    InvalidArgumentError,
    PackageInvalidError,
    PackagingError,
)
from aumai_packageseal.events import Listener
from aumai_packageseal.extractor import extract_manifest
from aumai_packageseal.models import PackagingUpdate, UpdateType
from aumai_packageseal.observability import configure_logging
from aumai_packageseal.verifier import verify_package

# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------


def _echo_listener(verbose: bool) -> Listener:
    def listener(update: PackagingUpdate) -> None:
        if update.type == UpdateType.verbose and not verbose:
            return
        prefix = "OK: " if update.type == UpdateType.success else ""
        click.echo(f"{prefix}{update.message}", err=True)

    return listener


def _load_settings() -> PackagingSettings:
    try:
        return PackagingSettings.from_env()
    except (PackagingError, ValueError) as exc:
        click.echo(f"Error: invalid configuration: {exc}", err=True)
        sys.exit(1)


# ---------------------------------------------------------------------------
# CLI
# ---------------------------------------------------------------------------


@click.group()
@click.version_option()
@click.option("--log-format", type=click.Choice(["console", "json"]), default=None)
@click.option("--log-level", default=None, metavar="LEVEL")
def main(log_format: str | None, log_level: str | None) -> None:
    """AumAI PackageSeal: integrity and authenticity checks for packages."""
    configure_logging(log_format=log_format, log_level=log_level, force=True)


@main.command("verify")
@click.argument("package", metavar="PACKAGE")
@click.option(
    "--public-key",
    default=None,
    metavar="PATH",
    help="PEM public key of the publisher (skips the remote key lookup).",
)
@click.option("--verbose", is_flag=True, help="Show every verification step.")
def verify_command(package: str, public_key: str | None, verbose: bool) -> None:
    """Verify the structure and signatures of PACKAGE."""
    settings = _load_settings()

    try:
        verify_package(
            package,
            public_key,
            settings=settings,
            listeners=[_echo_listener(verbose)],
        )
    except InvalidArgumentError as exc:
        click.echo(f"Error: {exc.message}", err=True)
        sys.exit(1)
    except PackageInvalidError as exc:
        click.echo(f"Package: INVALID ({exc.message})", err=True)
        sys.exit(2)
    except PackagingError as exc:
        click.echo(f"Error: {exc.message}", err=True)
        sys.exit(1)

    click.echo(f"Package: VALID ({package})")


@main.command("extract-manifest")
@click.argument("package", metavar="PACKAGE")
@click.option(
    "--output",
    default=None,
    metavar="PATH",
    help="Write the manifest here instead of printing it.",
)
@click.option("--verbose", is_flag=True, help="Show every extraction step.")
def extract_manifest_command(package: str, output: str | None, verbose: bool) -> None:
    """Extract the manifest of PACKAGE."""
    settings = _load_settings()

    try:
        manifest = extract_manifest(
            package,
            output,
            settings=settings,
            listeners=[_echo_listener(verbose)],
        )
    except PackagingError as exc:
        click.echo(f"Error: {exc.message}", err=True)
        sys.exit(1)

    if output is None:
        click.echo(encode_manifest(manifest))


if __name__ == "__main__":
    main()
