from rich.console import Console

# stdout carries the MCP wire protocol; everything human-facing goes to stderr.
console = Console(stderr=True)

__version__ = "3.0.0"


def banner():
    console.print(
        r"""
[bold cyan]
  ___               _       __  __  ___ ___
 / _ \ _ __  _ _ (_) ___ |  \/  |/ __| _ \
| (_) | '  \| ' \| ||___|| |\/| | (__|  _/
 \___/|_|_|_|_||_|_|     |_|  |_|\___|_|
[/bold cyan]
"""
    )

    console.print(f"[bright_white]v{__version__}[/bright_white]  [dim]stdio transport[/dim]")
    console.print()
