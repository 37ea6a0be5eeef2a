"""Typer CLI entrypoint."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any

import typer

from redgearctl.core.device_match import best_profile_for_device
from redgearctl.core.errors import RedgearctlError
from redgearctl.core.model import (
    DPI_VALUES,
    BreathingSpeed,
    Configuration,
    ContinuousFire,
    DpiLevel,
    LedBrightness,
    LedMode,
    LedStatus,
    WriteErrorPolicy,
)
from redgearctl.core.service import MouseService

app = typer.Typer(
    help="Configure the Redgear A-15 gaming mouse over HID feature reports",
    no_args_is_help=True,
)

_DPI_HELP = "DPI level: " + ", ".join(f"{level.value}={cpi}" for level, cpi in DPI_VALUES.items())


@dataclass(frozen=True)
class _Options:
    repeat: int | None
    firing_interval: int | None
    continuous: ContinuousFire | None
    led_brightness: LedBrightness | None
    breathing_speed: BreathingSpeed | None
    profile: str | None
    device: str | None
    on_write_error: WriteErrorPolicy | None
    dry_run: bool
    yes: bool


def _build_service() -> MouseService:
    service = MouseService()
    for warning in getattr(service, "load_warnings", ()):
        typer.echo(f"Warning: {warning}", err=True)
    return service


def _run(ctx: typer.Context, **terminal: Any) -> None:
    opts: _Options = ctx.obj
    try:
        config = Configuration(
            repeat=opts.repeat,
            firing_interval=opts.firing_interval,
            led_brightness=opts.led_brightness,
            continuous_fire=opts.continuous,
            breathing_speed=opts.breathing_speed,
            **terminal,
        )
        if opts.continuous is ContinuousFire.ENABLE and opts.repeat is not None:
            typer.echo("Warning: continuous fire disables the repeat count", err=True)

        service = _build_service()
        if opts.dry_run:
            profile, frames = service.plan(config, profile_id=opts.profile)
            typer.echo(f"{profile.name}: {len(frames)} frames")
            for index, frame in enumerate(frames):
                typer.echo(f"{index:02d} {frame.hex()}")
            return

        result = service.apply(
            config,
            profile_id=opts.profile,
            device_hint=opts.device,
            on_write_error=opts.on_write_error,
        )
    except RedgearctlError as exc:
        typer.echo(f"Error: {exc}", err=True)
        raise typer.Exit(code=1) from None

    report = result.report
    for warning in report.warnings:
        typer.echo(f"Warning: {warning}", err=True)
    written = sum(1 for outcome in report.outcomes if outcome.written)
    typer.echo(
        f"Sent {written}/{report.total} frames to {result.target.device.usb_id} "
        f"({result.target.profile.id}): {report.status}"
    )
    if report.aborted:
        raise typer.Exit(code=1)


@app.callback()
def main(
    ctx: typer.Context,
    repeat: int | None = typer.Option(
        None, "--repeat", "-r", min=0, max=255, help="Auto-fire repeat count (0-255)"
    ),
    firing_interval: int | None = typer.Option(
        None, "--firing-interval", "-f", min=0, max=255, help="Delay between shots (0-255)"
    ),
    continuous: ContinuousFire | None = typer.Option(
        None, "--continuous", help="Continuous fire; enabling it disables the repeat count"
    ),
    led_brightness: LedBrightness | None = typer.Option(None, "--led-brightness", help="LED brightness"),
    breathing_speed: BreathingSpeed | None = typer.Option(
        None, "--breathing-speed", help="Breathing speed (bs1-bs8, higher is faster)"
    ),
    profile: str | None = typer.Option(None, "--profile", help="Profile ID"),
    device: str | None = typer.Option(None, "--device", help="USB id (vvvv:pppp) or partial name"),
    on_write_error: WriteErrorPolicy | None = typer.Option(
        None, "--on-write-error", help="Continue or abort when a frame write fails"
    ),
    dry_run: bool = typer.Option(False, "--dry-run", help="Print the frames instead of sending them"),
    yes: bool = typer.Option(False, "--yes", "-y", help="Do not ask for confirmation"),
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Log every feature report"),
) -> None:
    if verbose:
        logging.basicConfig(level=logging.DEBUG, format="%(levelname)s %(name)s: %(message)s")
    ctx.obj = _Options(
        repeat=repeat,
        firing_interval=firing_interval,
        continuous=continuous,
        led_brightness=led_brightness,
        breathing_speed=breathing_speed,
        profile=profile,
        device=device,
        on_write_error=on_write_error,
        dry_run=dry_run,
        yes=yes,
    )


@app.command("apply")
def apply_settings(ctx: typer.Context) -> None:
    """Send fire-control and LED options, keeping the DPI and LED mode frame at baseline."""
    _run(ctx)


@app.command("dpi")
def set_dpi(ctx: typer.Context, level: DpiLevel = typer.Argument(..., help=_DPI_HELP)) -> None:
    """Set DPI level."""
    _run(ctx, dpi=level)


@app.command("led")
def set_led_mode(ctx: typer.Context, mode: LedMode) -> None:
    """Set LED lighting mode."""
    _run(ctx, led_mode=mode)


@app.command("led-status")
def set_led_status(ctx: typer.Context, state: LedStatus) -> None:
    """Enable or disable LED lights."""
    _run(ctx, led_status=state)


@app.command("reset")
def reset(ctx: typer.Context) -> None:
    """Reset all mouse settings to their default values."""
    opts: _Options = ctx.obj
    if not (opts.yes or opts.dry_run):
        typer.confirm("Reset all mouse settings to their default values?", abort=True)
    _run(ctx, reset=True)


@app.command("profiles")
def list_profiles() -> None:
    """List available device profiles."""
    try:
        service = _build_service()
        profiles = service.list_profiles()
        if not profiles:
            typer.echo("No profiles loaded")
            raise typer.Exit(code=1)

        for profile in profiles:
            typer.echo(
                f"{profile.id}: {profile.name} "
                f"[{profile.match.vendor_id:04x}:{profile.match.product_id:04x}] "
                f"{len(profile.template)} frames"
            )
            for setting, spec in profile.frames.items():
                typer.echo(f"  {setting.value}: {', '.join(spec.values)}")
    except RedgearctlError as exc:
        typer.echo(f"Error: {exc}", err=True)
        raise typer.Exit(code=1) from None


@app.command("devices")
def list_devices() -> None:
    """List attached HID devices and the matched profile."""
    try:
        service = _build_service()
        devices = service.list_devices()
        if not devices:
            typer.echo("No HID devices found")
            return

        for device in devices:
            profile = best_profile_for_device(device, service.profiles)
            matched = profile.id if profile else "<no-match>"
            typer.echo(f"{device.usb_id} {device.name} -> {matched}")
    except RedgearctlError as exc:
        typer.echo(f"Error: {exc}", err=True)
        raise typer.Exit(code=1) from None


def run() -> None:
    app()


if __name__ == "__main__":
    run()
