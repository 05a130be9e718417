from .locator import DockToolLocator
from .parser import parse_dock_list
from .reader import DockReader
from .runner import CommandResult, CommandRunner, Runner
from .writer import DockWriter

__all__ = [
  "CommandResult",
  "CommandRunner",
  "DockReader",
  "DockToolLocator",
  "DockWriter",
  "Runner",
  "parse_dock_list",
]
