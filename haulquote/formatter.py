"""Format quotes, station lists and errors for terminal output."""

from haulquote.stations import Station


def format_isk(amount: float) -> str:
    """``1234567.5`` -> ``"1,234,567.50 ISK"``."""
    return f"{amount:,.2f} ISK"


def format_quote(quote: dict) -> str:
    """Format a quote dict into rich-compatible terminal markup.

    Args:
        quote: Result of :func:`haulquote.pricing.calculate_price`.

    Returns:
        String with rich console markup for styled terminal output.
    """
    lines: list[str] = []

    lines.append("")
    lines.append(f"[bold cyan]{'=' * 60}[/bold cyan]")
    lines.append("[bold cyan]  HAUL QUOTE[/bold cyan]")
    lines.append(f"[bold cyan]{'=' * 60}[/bold cyan]")
    lines.append(f"  [dim]From:[/dim] {quote['pickupStation']}")
    lines.append(f"  [dim]To:[/dim]   {quote['destinationStation']}")
    lines.append("")
    lines.append(f"  [dim]Volume:[/dim]         {quote['volume']:,} m³")
    lines.append(f"  [dim]Collateral:[/dim]     {format_isk(quote['collateral'])}")
    lines.append(f"  [dim]{'─' * 56}[/dim]")
    lines.append(f"  Base price:     {format_isk(quote['basePrice'])}")
    lines.append(f"  Collateral fee: {format_isk(quote['collateralFee'])}")
    lines.append(f"  [bold green]Total:          {format_isk(quote['totalPrice'])}[/bold green]")
    lines.append("")

    return "\n".join(lines)


def format_stations(stations: list[Station]) -> str:
    lines = ["", "[bold yellow]  STATIONS[/bold yellow]", f"  [dim]{'─' * 56}[/dim]"]
    for station in stations:
        lines.append(
            f"  [bold]{station.id}[/bold]  {station.name} "
            f"[dim]({station.system}, {station.system_id})[/dim]"
        )
    lines.append("")
    return "\n".join(lines)


def format_error(error: dict) -> str:
    """Format an error dict for terminal display.

    Args:
        error: Error dict with 'error' and 'message' keys.

    Returns:
        String with rich markup for error display.
    """
    code = error.get("error", "unknown_error")
    message = error.get("message", "An unknown error occurred.")
    return f"\n[bold red]  Error: {code}[/bold red]\n  {message}\n"
