# trimmer/printer.py
# Centralized output formatter for the trimmer CLI.

import os
import sys
from typing import Optional, TextIO


class OutputPrinter:
    """
    Console output for a batch run.

    Settings go out before work starts, then a summary or an error at the
    end. Errors go to stderr and ignore --quiet. Color is off with
    --no-color or when NO_COLOR is set, and a symbol always goes with it.
    """

    # (symbol, ANSI color) per message kind
    STYLES : dict[str, tuple[str, str]] = {
        "done"     : ("✅", "32"),
        "error"    : ("❌", "31"),
        "warning"  : ("⚠️ ", "33"),
        "settings" : ("ℹ️ ", "36"),
    }
    HINT_COLOR : str = "36"
    KEY_COLOR  : str = "90"
    KEY_WIDTH  : int = 26

    def __init__(self, quiet : bool = False, no_color : bool = False) -> None:
        self.quiet    : bool = quiet
        self.no_color : bool = no_color or bool(os.environ.get("NO_COLOR", ""))

    def _paint(self, text : str, code : str) -> str:
        return text if self.no_color else f"\033[{code}m{text}\033[0m"

    def _emit(
        self,
        kind    : str,
        message : str,
        hint    : Optional[str] = None,
        details : Optional[dict[str, str]] = None,
        stream  : Optional[TextIO] = None,
    ) -> None:
        out: TextIO = stream or sys.stdout
        symbol, color = self.STYLES[kind]
        lead: str = "" if kind == "settings" else "\n"
        print(f"{lead}{self._paint(symbol, color)} {self._paint(message, color)}", file=out)
        for key, value in (details or {}).items():
            label: str = self._paint(key.ljust(self.KEY_WIDTH), self.KEY_COLOR)
            print(f"    {label}: {value}", file=out)
        if hint:
            print("    " + self._paint("→ " + hint, self.HINT_COLOR), file=out)

    def settings(self, title : str, details : dict[str, str]) -> None:
        if not self.quiet:
            self._emit("settings", title, details=details)

    def success(self, title : str, details : Optional[dict[str, str]] = None) -> None:
        if not self.quiet:
            self._emit("done", title, details=details)

    def warning(self, message : str, hint : Optional[str] = None) -> None:
        if not self.quiet:
            self._emit("warning", message, hint=hint)

    def error(self, message : str, hint : Optional[str] = None) -> None:
        """Print to stderr; never silenced by --quiet."""
        self._emit("error", message, hint=hint, stream=sys.stderr)
