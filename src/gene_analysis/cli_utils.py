"""Terminal output helpers that respect quiet mode."""

import click

from .models import StageStatus, StructureStatus

# Global flag for quiet mode
_quiet_mode = False

STATUS_COLORS = {
    StageStatus.LIVE: 'green',
    StageStatus.FALLBACK: 'yellow',
    StageStatus.SKIPPED: 'blue',
    StructureStatus.AVAILABLE: 'green',
    StructureStatus.NOT_FOUND: 'yellow',
    StructureStatus.LOOKUP_FAILED: 'red',
}


def set_quiet_mode(quiet: bool) -> None:
    """Set the global quiet mode flag."""
    global _quiet_mode
    _quiet_mode = quiet


def echo(message: str = "", err: bool = False, **kwargs) -> None:
    """Echo wrapper that respects quiet mode."""
    if _quiet_mode and not err:
        return
    click.echo(message, err=err, **kwargs)


def secho(message: str = "", err: bool = False, **kwargs) -> None:
    """Styled echo wrapper that respects quiet mode."""
    if _quiet_mode and not err:
        return
    click.secho(message, err=err, **kwargs)


def heading(title: str) -> None:
    secho(f"\n{title}", bold=True)
    echo("-" * len(title))


def field(label: str, value) -> None:
    """Print an aligned 'label: value' line."""
    echo(f"  {label + ':':<14} {value}")


def status_label(status) -> str:
    """Colored status text for stage and structure outcomes."""
    return click.style(status.value, fg=STATUS_COLORS.get(status))
