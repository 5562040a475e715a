"""Check that every variable declared in a .env file is set in the environment.

Usage:
    python -m haulquote.scripts.check_env --env-file .env
"""

import logging
import os
import sys

import click
from dotenv import dotenv_values

from haulquote.config import ConfigError, load_settings

logger = logging.getLogger(__name__)

PLACEHOLDER_VALUE = "default_variable"
SENSITIVE_MARKERS = ("PASSWORD", "SECRET", "KEY", "TOKEN")


def is_sensitive(name: str) -> bool:
    return any(marker in name for marker in SENSITIVE_MARKERS)


def find_problems(declared: dict, environ: dict) -> dict:
    """Compare declared variable names against an environment mapping.

    Returns:
        ``{"missing": [names], "placeholder": [names]}``.
    """
    missing: list[str] = []
    placeholder: list[str] = []
    for name in declared:
        value = environ.get(name)
        if not value:
            missing.append(name)
        elif value == PLACEHOLDER_VALUE:
            placeholder.append(name)
    return {"missing": missing, "placeholder": placeholder}


def _label(name: str) -> str:
    return f"{name} (SENSITIVE)" if is_sensitive(name) else name


@click.command()
@click.option("--env-file", default=".env", show_default=True,
              type=click.Path(dir_okay=False), help="Path to the .env file to check.")
def main(env_file: str) -> None:
    """Report .env variables that are unset or still hold placeholder values."""
    logging.basicConfig(
        level=logging.INFO,
        format="%(asctime)s %(levelname)s %(message)s",
        datefmt="%H:%M:%S",
    )

    if not os.path.exists(env_file):
        click.echo(f"Error: .env file not found at {env_file}", err=True)
        sys.exit(1)

    declared = dotenv_values(env_file)
    if not declared:
        click.echo("No variables found in .env file.")
        return

    problems = find_problems(declared, dict(os.environ))

    if problems["missing"]:
        click.echo("The following variables are missing from the environment:", err=True)
        for name in problems["missing"]:
            click.echo(f"  - {_label(name)}", err=True)

    if problems["placeholder"]:
        click.echo(f"The following variables still hold {PLACEHOLDER_VALUE!r}:", err=True)
        for name in problems["placeholder"]:
            click.echo(f"  - {_label(name)}", err=True)

    if problems["missing"] or problems["placeholder"]:
        sys.exit(1)

    try:
        settings = load_settings()
    except ConfigError as exc:
        click.echo(f"Error: {exc}", err=True)
        sys.exit(1)

    logger.info("Loaded %d allowed origins, %d rate-limit exemptions",
                len(settings.allowed_origins), len(settings.no_rate_limit_ips))
    click.echo("All environment variables are properly configured.")


if __name__ == "__main__":
    main()
