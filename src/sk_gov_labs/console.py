"""Rich console helpers shared by the labs.

Every lab program reports progress through these helpers so the output looks
the same whether it comes from a plugin, a filter, or the CLI.
"""
from rich.console import Console
from rich.markdown import Markdown
from rich.panel import Panel
from rich.text import Text
from rich.theme import Theme

_theme = Theme(
    {
        "info": "bold cyan",
        "success": "bold green",
        "warning": "bold yellow",
        "error": "bold red",
        "muted": "dim",
        "title": "bold blue",
        "section": "blue",
        "agent": "bold magenta",
    }
)
console = Console(theme=_theme)
console_err = Console(stderr=True, theme=_theme)


def log_info(msg: str) -> None:
    console.print(f"[info]ℹ️ {msg}[/info]")


def log_success(msg: str) -> None:
    console.print(f"[success]✅ {msg}[/success]")


def log_warning(msg: str) -> None:
    console.print(f"[warning]⚠️ {msg}[/warning]")


def log_error(msg: str) -> None:
    console_err.print(f"[error]❌ {msg}[/error]")


def log_note(msg: str) -> None:
    console.print(f"[muted]{msg}[/muted]")


def log_rule(title: str) -> None:
    console.rule(f"[title]{title}[/title]")


def log_section(title: str, content: str, *, markdown: bool = False, border: str = "section") -> None:
    body = Markdown(content) if markdown else Text(content)
    console.print(Panel(body, title=title, title_align="left", border_style=border))
