"""Glass Interpreter CLI - glassinterp command line tool."""

from __future__ import annotations

import asyncio
import json
from pathlib import Path
from typing import Optional

import typer
from rich.console import Console
from rich.panel import Panel
from rich.table import Table

from glassinterp import __version__
from glassinterp.common import setup_logging
from glassinterp.config import Config, load_config
from glassinterp.languages import LANGUAGE_CODES
from glassinterp.models import PipelineState, TranscriptSegment, TranslationEvent
from glassinterp.pipeline import SessionRecorder, create_pipeline

app = typer.Typer(
    name="glassinterp",
    help="Simultaneous speech translation for AI glasses",
    no_args_is_help=True,
)
console = Console()


def get_config(config_path: Path | None = None) -> Config:
    """Get configuration."""
    return load_config(config_path)


@app.command()
def run(
    source: Optional[str] = typer.Option(None, "--source", "-s", help="Spoken language"),
    target: Optional[str] = typer.Option(None, "--target", "-t", help="Translation language"),
    mock: bool = typer.Option(True, "--mock/--no-mock", help="Use mock engines"),
    mute: bool = typer.Option(False, "--mute", help="Do not speak translations"),
    duration: float = typer.Option(15.0, "--duration", "-d", help="Session length in seconds"),
    script: Optional[Path] = typer.Option(None, "--script", help="Utterances for the mock recognizer"),
    save: Optional[Path] = typer.Option(None, "--save", help="Write the session as JSON"),
    config_path: Optional[Path] = typer.Option(None, "--config", help="Config file"),
):
    """Run one live translation session."""
    cfg = get_config(config_path)
    cfg.mock_mode = mock
    source = source or cfg.pipeline.default_source
    target = target or cfg.pipeline.default_target
    setup_logging(
        level=cfg.device.log_level,
        json_output=cfg.device.mode == "production",
        service_name="glassinterp",
    )

    lines = None
    if script:
        lines = [line.strip() for line in script.read_text().splitlines() if line.strip()]

    async def _run() -> PipelineState:
        pipeline = await create_pipeline(cfg, script=lines)
        recorder = SessionRecorder()

        def on_status(status: PipelineState) -> None:
            console.print(f"[dim]status:[/] {status.value}")

        def on_transcript(segment: TranscriptSegment) -> None:
            if segment.is_final:
                console.print(f"[cyan]{source}:[/] {segment.text}")

        def on_translation(event: TranslationEvent) -> None:
            console.print(f"[green]{event.language}:[/] {event.text}")

        def on_error(message: str) -> None:
            console.print(f"[red]Error:[/] {message}")

        pipeline.on_status_change = on_status
        pipeline.on_source_transcript = on_transcript
        pipeline.on_translation = on_translation
        pipeline.on_error = on_error
        recorder.attach(pipeline)

        pipeline.prepare_audio()
        pipeline.set_audio_output(not mute)
        await pipeline.start(source, target)

        try:
            if pipeline.status == PipelineState.LISTENING:
                await asyncio.sleep(duration)
        finally:
            final_status = pipeline.status
            await pipeline.close()

        if save:
            session = recorder.to_session(source, target)
            save.parent.mkdir(parents=True, exist_ok=True)
            save.write_text(session.model_dump_json(indent=2))
            console.print(f"[green]Saved[/] {len(session.source_transcript)} segments to {save}")

        return final_status

    try:
        final_status = asyncio.run(_run())
    except KeyboardInterrupt:
        console.print("[dim]Interrupted[/]")
        return

    if final_status == PipelineState.ERROR:
        raise typer.Exit(code=1)


@app.command()
def languages():
    """List supported languages."""
    table = Table(title="Languages")
    table.add_column("Name", style="cyan")
    table.add_column("Locale")

    for name, code in LANGUAGE_CODES.items():
        table.add_row(name, code)

    console.print(table)


@app.command()
def version():
    """Show version information."""
    console.print(f"[bold]Glass Interpreter[/] v{__version__}")


@app.command()
def config(
    json_output: bool = typer.Option(False, "--json-output", help="Print as JSON"),
    config_path: Optional[Path] = typer.Option(None, "--config", help="Config file"),
):
    """Show configuration."""
    cfg = get_config(config_path)

    if json_output:
        print(json.dumps(cfg.model_dump(), indent=2, default=str))
        return

    console.print(Panel(f"[bold]{cfg.device.name}[/] ({cfg.device.mode})", title="Configuration"))
    console.print(f"  Mock Mode: {cfg.mock_mode}")
    console.print("\n[bold]Pipeline[/]")
    console.print(f"  Languages: {cfg.pipeline.default_source} -> {cfg.pipeline.default_target}")
    console.print("\n[bold]Translation[/]")
    console.print(f"  Provider: {cfg.translation.provider}")
    console.print(f"  Model: {cfg.translation.model}")
    console.print("\n[bold]Audio[/]")
    console.print(f"  Sample Rate: {cfg.audio.sample_rate} Hz")
    console.print(f"  Meter: {cfg.audio.frame_rate_hz:g} fps, FFT {cfg.audio.fft_size}")
    console.print("\n[bold]Synthesis[/]")
    console.print(f"  Enabled: {cfg.synthesis.enabled}")


def main():
    """Main entry point."""
    app()


if __name__ == "__main__":
    main()
