"""Gesture Galaxy CLI.

Usage:
    gesture-galaxy run          Live camera-driven particle field
    gesture-galaxy record       Run live and record hand input to a file
    gesture-galaxy replay       Replay a recorded session (headless or shown)
    gesture-galaxy field        Generate a field and print its shape stats
    gesture-galaxy init-config  Write the default settings YAML
"""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Optional

import numpy as np
import typer

from gesture_galaxy.config import ConfigError, Settings, load_settings

app = typer.Typer(
    name="gesture-galaxy",
    help="🌌 Hand-gesture controlled spiral particle field.",
    add_completion=False,
)


def _setup(config: Optional[str], log_level: str) -> Settings:
    logging.basicConfig(
        level=getattr(logging, log_level.upper(), logging.INFO),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )
    try:
        return load_settings(config)
    except (ConfigError, OSError) as e:
        typer.echo(f"❌ Invalid config: {e}", err=True)
        raise typer.Exit(1)


@app.command()
def run(
    config: Optional[str] = typer.Option(None, "--config", "-c", help="Path to settings YAML"),
    camera: Optional[int] = typer.Option(None, help="Camera device index (overrides config)"),
    no_camera: bool = typer.Option(False, "--no-camera", help="Show the field with keyboard control only"),
    log_level: str = typer.Option("info", help="Log level"),
):
    """Start the live particle field."""
    from dataclasses import replace

    from gesture_galaxy.app import CameraError, GalaxyApp

    settings = _setup(config, log_level)
    if camera is not None:
        settings = replace(settings, app=replace(settings.app, camera_index=camera))

    galaxy = GalaxyApp(settings)
    typer.echo("🌌 Space: expand/contract | R: reset view | Q: quit")

    if no_camera:
        galaxy.preview()
        return

    try:
        frames = galaxy.run()
    except (CameraError, ImportError) as e:
        typer.echo(f"❌ Error: {e}", err=True)
        raise typer.Exit(1)
    typer.echo(f"✅ Rendered {frames} frames")


@app.command()
def record(
    output: str = typer.Option("session.json", "-o", help="Output file path"),
    config: Optional[str] = typer.Option(None, "--config", "-c", help="Path to settings YAML"),
    max_frames: int = typer.Option(0, help="Stop after this many frames (0 = until quit)"),
    log_level: str = typer.Option("info", help="Log level"),
):
    """Run the live field and record hand input for later replay."""
    from gesture_galaxy.app import CameraError, GalaxyApp
    from gesture_galaxy.recorder import SessionRecorder

    settings = _setup(config, log_level)
    recorder = SessionRecorder()
    galaxy = GalaxyApp(settings, recorder=recorder)

    typer.echo("🎥 Recording... press Q to stop")
    try:
        galaxy.run(max_frames=max_frames)
    except (CameraError, ImportError) as e:
        typer.echo(f"❌ Error: {e}", err=True)
        raise typer.Exit(1)

    recorder.save(output)
    typer.echo(f"📼 Recorded {recorder.frame_count} frames ({recorder.duration:.1f}s)")
    typer.echo(f"💾 Saved to: {output}")


@app.command()
def replay(
    recording: str = typer.Argument(..., help="Path to recording file"),
    config: Optional[str] = typer.Option(None, "--config", "-c", help="Path to settings YAML"),
    show: bool = typer.Option(False, help="Render frames to a window at original timing"),
    speed: float = typer.Option(1.0, help="Playback speed multiplier (with --show)"),
    log_level: str = typer.Option("warning", help="Log level"),
):
    """Replay a recorded session through the interaction engine."""
    from gesture_galaxy.controller import GalaxyController
    from gesture_galaxy.recorder import SessionPlayer

    settings = _setup(config, log_level)

    path = Path(recording)
    if not path.exists():
        typer.echo(f"❌ Recording not found: {recording}", err=True)
        raise typer.Exit(1)

    try:
        player = SessionPlayer.load(path)
    except ValueError as e:
        typer.echo(f"❌ {e}", err=True)
        raise typer.Exit(1)

    typer.echo(f"▶️  Replaying {path.name} ({player.frame_count} frames, {player.duration:.1f}s)")

    controller = GalaxyController(settings)
    controller.on_notify(lambda msg: typer.echo(f"   💬 {msg}"))

    renderer = None
    if show:
        import cv2
        from gesture_galaxy.renderer import ParticleRenderer
        renderer = ParticleRenderer(settings.app)

    frames = player.play_realtime(speed=speed) if show else player.play()
    for frame in frames:
        player.apply(frame, controller)
        transform = controller.tick(now=frame.timestamp)
        if renderer is not None:
            cv2.imshow("Gesture Galaxy (replay)", renderer.render(controller.field, transform))
            if cv2.waitKey(1) & 0xFF == ord("q"):
                break

    motion = controller.motion
    typer.echo(
        f"\n✅ Replay complete. scale={motion.expand_factor:.3f} "
        f"target={controller.target:.1f} yaw={motion.yaw:.3f} pitch={motion.pitch:.3f}"
    )


@app.command("field")
def field_info(
    config: Optional[str] = typer.Option(None, "--config", "-c", help="Path to settings YAML"),
    seed: Optional[int] = typer.Option(None, help="Random seed for reproducible jitter"),
    output: Optional[str] = typer.Option(None, "-o", help="Save positions/colors to .npz"),
    image: Optional[str] = typer.Option(None, help="Render a still image to this path"),
    log_level: str = typer.Option("warning", help="Log level"),
):
    """Generate a particle field and report its shape."""
    from gesture_galaxy.field import generate_field

    settings = _setup(config, log_level)
    cfg = settings.field
    field = generate_field(cfg, np.random.default_rng(seed))

    radius = field.planar_radius
    arm_counts = np.bincount(field.arms, minlength=cfg.spiral_arms)
    typer.echo(f"🌌 {field.count} particles, {cfg.spiral_arms} arms (tightness {cfg.spiral_tightness})")
    typer.echo(f"   radius: mean={radius.mean():.3f} max={radius.max():.3f} (limit {cfg.max_radius})")
    typer.echo(f"   thickness: {np.ptp(field.positions[:, 1]):.3f}")
    typer.echo(f"   per arm: {', '.join(str(int(c)) for c in arm_counts)}")

    if output:
        path = Path(output).with_suffix(".npz")
        np.savez_compressed(path, positions=field.positions, colors=field.colors, t=field.t)
        typer.echo(f"💾 Saved buffers to {path}")

    if image:
        import cv2
        from gesture_galaxy.controller import GalaxyController
        from gesture_galaxy.renderer import ParticleRenderer

        transform = GalaxyController(settings, field=field).tick(now=0.0)
        cv2.imwrite(image, ParticleRenderer(settings.app).render(field, transform))
        typer.echo(f"🖼  Saved image to {image}")


@app.command("init-config")
def init_config(
    output: str = typer.Argument("galaxy.yml", help="Where to write the settings file"),
    force: bool = typer.Option(False, help="Overwrite an existing file"),
):
    """Write the default settings to a YAML file."""
    path = Path(output)
    if path.exists() and not force:
        typer.echo(f"❌ {output} already exists (use --force to overwrite)", err=True)
        raise typer.Exit(1)

    Settings().to_yaml(path)
    typer.echo(f"💾 Wrote default settings to {output}")


def main():
    app()


if __name__ == "__main__":
    main()
