"""Console logging utilities for the CHIP-8 machine.

Provides a colorized console logger and a machine-specific subclass that
reports and counts faults raised while ticking.
"""

import time
import sys
from collections import Counter
from typing import Optional

from chip8vm.faults import Fault


class ConsoleLogger:
    """Console logger with levels, timestamps and colors."""

    def __init__(
        self,
        name: str = "Chip8",
        log_level: str = "INFO",
        use_colors: bool = True,
        show_timestamps: bool = True,
    ):
        self.name = name
        self.log_level = log_level.upper()
        self.use_colors = (
            use_colors and hasattr(sys.stdout, "isatty") and sys.stdout.isatty()
        )
        self.show_timestamps = show_timestamps
        self.start_time = time.time()

        self.colors = (
            {
                "DEBUG": "\033[36m",
                "INFO": "\033[32m",
                "WARNING": "\033[33m",
                "ERROR": "\033[31m",
                "CRITICAL": "\033[35m",
                "RESET": "\033[0m"
            }
            if self.use_colors
            else {
                k: ""
                for k in ["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL", "RESET"]
            }
        )

        self.level_order = {
            "DEBUG": 0,
            "INFO": 1,
            "WARNING": 2,
            "ERROR": 3,
            "CRITICAL": 4,
        }

    def _should_log(self, level: str) -> bool:
        """Check if message should be logged based on current log level."""
        return self.level_order.get(level.upper(), 1) >= self.level_order.get(
            self.log_level, 1
        )

    def _format_message(self, level: str, message: str) -> str:
        """Format log message with timestamp, level, and colors."""
        timestamp = (
            f"[{time.time() - self.start_time:8.2f}s]" if self.show_timestamps else ""
        )
        level_str = f"[{level:>8s}]"
        name_str = f"[{self.name}]"

        if self.use_colors:
            color = self.colors.get(level.upper(), "")
            reset = self.colors["RESET"]
            level_str = f"{color}{level_str}{reset}"

        return f"{timestamp}{level_str}{name_str} {message}"

    def log(self, level: str, message: str):
        """Log a message at the specified level."""
        if self._should_log(level):
            formatted = self._format_message(level, message)
            print(formatted, flush=True)

    def debug(self, message: str):
        self.log("DEBUG", message)

    def info(self, message: str):
        self.log("INFO", message)

    def warning(self, message: str):
        self.log("WARNING", message)

    def error(self, message: str):
        self.log("ERROR", message)

    def critical(self, message: str):
        self.log("CRITICAL", message)


class MachineLogger(ConsoleLogger):
    """Logger that reports tick faults and keeps a count per fault kind."""

    def __init__(self, name: str = "Chip8", **kwargs):
        super().__init__(name, **kwargs)
        self.fault_counts = Counter()

    def log_fault(self, fault: Fault, pc: int, opcode: Optional[int] = None):
        """Report a fault raised by the instruction at ``pc``.

        Unknown opcodes are warnings since execution continues; any other
        fault halts the machine and is logged as an error.
        """
        if fault == Fault.NONE:
            return
        self.fault_counts[fault] += 1
        where = f"at 0x{pc:03X}"
        if opcode is not None:
            where = f"{where} (opcode 0x{opcode:04X})"
        if fault.is_fatal:
            self.error(f"{fault.name} {where}, machine halted")
        else:
            self.warning(f"{fault.name} {where}, treated as no-op")

    def reset_counts(self):
        self.fault_counts.clear()
