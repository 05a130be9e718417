from .errors import (
  CommandFailed,
  DockshiftError,
  EmptyDockSnapshot,
  ExecutableNotFound,
  ProfileNotFound,
  SpawnFailed,
  ToolUnavailable,
  ValidationError,
)
from .models import ApplyResult, DockEntry, DockSnapshot, EntryKind, TargetList
from .retry import PollOutcome, RetryPolicy, poll_until

__all__ = [
  "ApplyResult",
  "CommandFailed",
  "DockEntry",
  "DockSnapshot",
  "DockshiftError",
  "EmptyDockSnapshot",
  "EntryKind",
  "ExecutableNotFound",
  "PollOutcome",
  "ProfileNotFound",
  "RetryPolicy",
  "SpawnFailed",
  "TargetList",
  "ToolUnavailable",
  "ValidationError",
  "poll_until",
]
