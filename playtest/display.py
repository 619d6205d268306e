"""
Shape Dunk Play-test — Console Display

A DisplaySink that prints status messages and the game-over summary through
rich. Frames are only counted (one line per frame would flood the terminal);
pass show_frames=True to print a compact HUD line every `every` frames.
"""

from typing import Optional

from rich.console import Console
from rich.panel import Panel

from dunk_engine.display import Frame, StatusMessage
from dunk_engine.state import GameSummary

VARIANT_STYLES = {
    "info": "cyan",
    "miss": "bold red",
    "success": "white",
    "bonus": "bold green",
}


class ConsoleDisplay:
    """Prints engine output to a rich console."""

    def __init__(self, console: Optional[Console] = None, show_frames: bool = False, every: int = 60):
        self.console = console or Console()
        self.show_frames = show_frames
        self.every = max(1, every)
        self.frames = 0
        self.last_frame: Optional[Frame] = None

    def render_frame(self, frame: Frame) -> None:
        self.frames += 1
        self.last_frame = frame
        if self.show_frames and self.frames % self.every == 0:
            combo_left = (
                f"{frame.combo_remaining_ms / 1000:.1f}s" if frame.combo_remaining_ms is not None else "--"
            )
            token = frame.token
            token_text = (
                f"{token.color.value} {token.shape.value} @ ({token.position[0]:.0f}, {token.position[1]:.0f})"
                if token is not None else "-"
            )
            self.console.print(
                f"  [dim]{frame.time_remaining_s:>3}s[/dim]  score={frame.score:<6} "
                f"combo={frame.combo} ({combo_left})  token={token_text}"
            )

    def show_status(self, status: StatusMessage) -> None:
        style = VARIANT_STYLES.get(status.variant, "white")
        self.console.print(f"  [{style}]{status.text}[/{style}]")

    def show_game_over(self, summary: GameSummary) -> None:
        self.console.print(Panel(
            f"Final score: [bold]{summary.final_score}[/bold]\nBest combo: [bold]{summary.best_combo}[/bold]",
            title="Game Over",
            expand=False,
        ))
