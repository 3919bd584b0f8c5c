#!/usr/bin/env python3
"""
Prompt Exporter - Terminal Display

User-visible notices for capture and export: short success / warning /
error messages, a record summary table and a last-export status line.
Uses `rich` for styled output; plain text when NO_COLOR is set or stdout
is not a TTY. Never shows tracebacks.
"""

import os
import sys
from datetime import datetime
from typing import Dict, Optional

from rich.box import ROUNDED
from rich.console import Console
from rich.table import Table


class ExporterDisplay:
    """Terminal notices for the prompt exporter."""

    def __init__(self) -> None:
        self._use_rich = (
            not os.environ.get("NO_COLOR")
            and sys.stdout.isatty()
        )
        if self._use_rich:
            self._console = Console()
        else:
            self._console = None
        self.last_export_at: Optional[datetime] = None

    # =========================================================================
    # Notices
    # =========================================================================

    def success(self, text: str) -> None:
        if self._use_rich:
            self._console.print(f"[green]✓ {text}[/green]")
        else:
            print(f"[Prompt Exporter] {text}")

    def warning(self, text: str) -> None:
        if self._use_rich:
            self._console.print(f"[yellow]⚠ {text}[/yellow]")
        else:
            print(f"[Prompt Exporter] Warning: {text}")

    def error(self, text: str) -> None:
        if self._use_rich:
            self._console.print(f"[red]✗ {text}[/red]")
        else:
            print(f"[Prompt Exporter] Error: {text}", file=sys.stderr)

    def info(self, text: str) -> None:
        if self._use_rich:
            self._console.print(f"[dim]{text}[/dim]")
        else:
            print(f"[Prompt Exporter] {text}")

    # =========================================================================
    # Status
    # =========================================================================

    def mark_exported(self, when: Optional[datetime] = None) -> None:
        self.last_export_at = when or datetime.now()

    def status_line(self) -> str:
        if self.last_export_at is None:
            return "Last export: never"
        return f"Last export: {self.last_export_at.strftime('%Y-%m-%d %H:%M:%S')}"

    def export_status(self) -> None:
        self.info(self.status_line())

    def record_summary(self, counts: Dict[str, Dict[str, int]], chat_turns: int) -> None:
        """Table of per-section entry counts."""
        if self._use_rich:
            table = Table(title="Prompt Structure", box=ROUNDED)
            table.add_column("Section", style="bold")
            table.add_column("Text", justify="right")
            table.add_column("Chat Log", justify="right")
            table.add_column("Extension Keys", justify="right")
            for name, row in counts.items():
                table.add_row(
                    name,
                    str(row["text"]),
                    str(row["additionalChatLog"]),
                    str(row["extension"]),
                )
            table.caption = f"chatLog: {chat_turns} turns"
            self._console.print(table)
        else:
            print("PROMPT STRUCTURE")
            for name, row in counts.items():
                print(
                    f"  {name}: text={row['text']} "
                    f"additionalChatLog={row['additionalChatLog']} "
                    f"extension={row['extension']}"
                )
            print(f"  chatLog: {chat_turns} turns")
