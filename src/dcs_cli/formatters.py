"""Operator-facing output helpers.

Everything a human reads while the tools run goes through the shared rich
console here. Text coming from external processes is printed with markup
disabled so brackets in build output are shown verbatim.
"""

from rich.console import Console
from rich.markup import escape

from .errors import DcsError

console = Console(highlight=False, soft_wrap=True)

EMOJIS = {
    "ROCKET": "🚀",
    "CHECK": "✅",
    "CROSS": "❌",
    "GEAR": "⚙️",
    "LINK": "🔗",
    "KEY": "🔑",
    "SERVER": "🖥️",
    "INFO": "ℹ️",
    "WARN": "⚠️",
}

# Styles for streamed build/push output, keyed by LineKind value
LINE_STYLES = {
    "step": "cyan",
    "cache": "magenta",
    "success": "green",
    "info": "grey50",
    "error": "red",
}


def print_header(title: str) -> None:
    """Print a bold section header."""
    console.print(f"\n{EMOJIS['ROCKET']} {title}\n", style="bold blue")


def print_success(message: str) -> None:
    console.print(f"{EMOJIS['CHECK']} {message}", style="green", markup=False)


def print_failure(message: str) -> None:
    console.print(f"{EMOJIS['CROSS']} {message}", style="red", markup=False)


def print_warning(message: str) -> None:
    console.print(f"{EMOJIS['WARN']} {message}", style="yellow", markup=False)


def print_info(message: str, style: str = "blue") -> None:
    console.print(f"{EMOJIS['INFO']} {message}", style=style, markup=False)


def print_dim(text: str) -> None:
    """Print external output (logs) dimmed and unformatted."""
    console.print(text, style="grey50", markup=False)


def print_stream_line(line: str, kind: str) -> None:
    """Print one line of streamed tool output in its category color."""
    console.print(line, style=LINE_STYLES.get(kind, "grey50"), markup=False)


def print_summary(rows: list[tuple[str, str, str]]) -> None:
    """Print an aligned key/value summary.

    Args:
        rows: (emoji key, label, value) triples; rows with empty values are skipped
    """
    width = max((len(label) for _, label, value in rows if value), default=0)
    for emoji, label, value in rows:
        if not value:
            continue
        console.print(
            f"  [grey50]{EMOJIS[emoji]}[/grey50] {label + ':':<{width + 1}}  [green]{escape(value)}[/green]"
        )


def print_error(error: DcsError) -> None:
    """Print a fatal error and its remediation hint, if any."""
    console.print(f"\n{EMOJIS['CROSS']} Error: {error.message}", style="red", markup=False)
    if error.hint:
        console.print(f"\n{error.hint}", style="yellow", markup=False)
