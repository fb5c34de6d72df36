"""
termcourse-render - render frames and image previews from saved forum JSON.

Useful for checking layout at a given terminal size without a live session.
"""
from __future__ import annotations

import dataclasses
import json
from pathlib import Path
from typing import Any, Optional

import typer
from rich.console import Console

from .config import VERSION, setup_debug_logging
from .coordinator import RenderCoordinator
from .models import Topic, topics_from_list
from .preview.backends import AUTO_ORDER, BACKEND_TYPES
from .preview.pipeline import ImagePreviewPipeline
from .settings import IMAGE_BACKEND_CHOICES, IMAGE_MODES, Settings, load_settings

app = typer.Typer(
    name="termcourse-render",
    help="Render termcourse screens and image previews offline",
    no_args_is_help=True,
)

console = Console()


def _load_json(path: Path) -> dict[str, Any]:
    try:
        return json.loads(path.read_text(encoding="utf-8"))
    except (OSError, json.JSONDecodeError) as e:
        typer.echo(f"Cannot read {path}: {e}", err=True)
        raise typer.Exit(1)


def _settings() -> Settings:
    settings = load_settings()
    if settings.debug:
        setup_debug_logging()
    return settings


def _echo_screen(lines: list[str]) -> None:
    # color=True keeps SGR and hyperlinks when piped, e.g. into less -R
    for line in lines:
        typer.echo(line, color=True)


@app.command()
def frame(
    topic_json: Path = typer.Argument(..., help="Saved /t/{id}.json payload"),
    width: int = typer.Option(80, "--width", "-w", help="Terminal columns"),
    height: int = typer.Option(24, "--height", "-h", help="Terminal rows"),
    selected: int = typer.Option(0, "--selected", "-s", help="Focused post index"),
    scroll: int = typer.Option(0, "--scroll", help="Scroll offset inside the focused post"),
    base_url: str = typer.Option("", "--base-url", help="Forum base URL for upload:// images"),
    preview: bool = typer.Option(False, "--preview/--no-preview", help="Render the focused post's image"),
) -> None:
    """Render one topic screen."""
    settings = _settings()
    topic = Topic.from_api(_load_json(topic_json))

    pipeline = ImagePreviewPipeline.from_settings(settings, base_url=base_url) if preview else None
    coordinator = RenderCoordinator(settings, pipeline=pipeline, base_url=base_url)
    previews: dict[int, list[str]] = {}
    try:
        if pipeline is not None and 0 <= selected < len(topic.posts):
            post = topic.posts[selected]
            previews[post.id] = coordinator.load_preview(post, width)
    finally:
        if pipeline is not None:
            pipeline.close()

    screen = coordinator.render_topic_screen(
        topic.title, topic.posts, selected, {selected: scroll}, width, height, previews
    )
    _echo_screen(screen)


@app.command()
def topics(
    list_json: Path = typer.Argument(..., help="Saved /latest.json style payload"),
    width: int = typer.Option(80, "--width", "-w", help="Terminal columns"),
    height: int = typer.Option(24, "--height", "-h", help="Terminal rows"),
    selected: int = typer.Option(0, "--selected", "-s", help="Highlighted topic index"),
    filter_name: str = typer.Option("latest", "--filter", "-f", help="List filter label"),
    period: Optional[str] = typer.Option(None, "--period", help="Period for the top filter"),
    base_url: str = typer.Option("", "--base-url", help="Forum base URL shown in the header"),
) -> None:
    """Render the topic list screen."""
    coordinator = RenderCoordinator(_settings(), base_url=base_url)
    summaries = topics_from_list(_load_json(list_json))
    _echo_screen(coordinator.render_topic_list_screen(summaries, selected, filter_name, width, height, period))


@app.command("preview")
def preview_cmd(
    url: str = typer.Argument(..., help="Image URL"),
    width: int = typer.Option(60, "--width", "-w", help="Preview columns"),
    lines: int = typer.Option(12, "--lines", "-l", help="Maximum preview rows"),
    backend: Optional[str] = typer.Option(None, "--backend", "-b", help="auto, chafa, viu or off"),
    mode: Optional[str] = typer.Option(None, "--mode", "-m", help="mono, color or truecolor"),
    no_filter: bool = typer.Option(False, "--no-filter", help="Keep previews the quality filter would drop"),
) -> None:
    """Render one image the way a post preview would be drawn."""
    settings = _settings()
    if backend is not None and backend not in IMAGE_BACKEND_CHOICES:
        typer.echo(f"Unknown backend: {backend}", err=True)
        raise typer.Exit(1)
    if mode is not None and mode not in IMAGE_MODES:
        typer.echo(f"Unknown mode: {mode}", err=True)
        raise typer.Exit(1)
    settings = dataclasses.replace(
        settings,
        image_backend=backend or settings.image_backend,
        image_mode=mode or settings.image_mode,
        image_quality_filter=settings.image_quality_filter and not no_filter,
    )

    pipeline = ImagePreviewPipeline.from_settings(settings)
    try:
        if not pipeline.enabled:
            console.print("[dim]Image previews are disabled (no backend available).[/dim]")
            raise typer.Exit(1)
        rendered = pipeline.preview(url, width, lines)
    finally:
        pipeline.close()

    if not rendered:
        console.print("[dim]No preview.[/dim]")
        raise typer.Exit(1)
    _echo_screen(rendered)


@app.command()
def backends() -> None:
    """Show which image renderers are installed."""
    from rich.table import Table

    table = Table(title=f"Image backends (termcourse {VERSION})")
    table.add_column("Backend")
    table.add_column("Executable")
    table.add_column("Available")

    for name in AUTO_ORDER:
        backend = BACKEND_TYPES[name]()
        table.add_row(name, backend.executable, "✓" if backend.is_available() else "")

    console.print(table)


def main() -> None:
    app()


if __name__ == "__main__":
    main()
