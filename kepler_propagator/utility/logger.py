"""
Logger Utility
==============

Duplicates terminal output (stdout and stderr) into a run log file.
"""
import sys

from pathlib import Path
from typing  import Optional, TextIO


class TeeStream:
  """
  A stream that writes to a terminal stream and a shared log file.
  """
  def __init__(
    self,
    terminal : TextIO,
    log_file : TextIO,
  ):
    self.terminal = terminal
    self.log_file = log_file

  def write(
    self,
    message : str,
  ) -> int:
    self.terminal.write(message)
    if not self.log_file.closed:
      self.log_file.write(message)
      self.log_file.flush()
    return len(message)

  def flush(self) -> None:
    self.terminal.flush()
    if not self.log_file.closed:
      self.log_file.flush()

  def isatty(self) -> bool:
    return False


class LoggerContext:
  """
  Logger state needed to restore the original streams.
  """
  def __init__(
    self,
    log_filepath    : Path,
    log_file        : TextIO,
    original_stdout : TextIO,
    original_stderr : TextIO,
  ):
    self.log_filepath    = log_filepath
    self.log_file        = log_file
    self.original_stdout = original_stdout
    self.original_stderr = original_stderr

  def __enter__(self) -> 'LoggerContext':
    return self

  def __exit__(self, exc_type, exc_value, traceback) -> None:
    stop_logging(self)


def start_logging(
  log_filepath : Path,
) -> LoggerContext:
  """
  Start logging terminal output (stdout and stderr) to a file.

  Input:
  ------
    log_filepath : Path
      Path to the log file. Its folder must exist.

  Output:
  -------
    context : LoggerContext
      Context object for stop_logging(). Also usable in a with-statement.
  """
  original_stdout = sys.stdout
  original_stderr = sys.stderr

  # One handle for both streams keeps their lines in order in the file
  log_file = open(log_filepath, 'w')

  sys.stdout = TeeStream(original_stdout, log_file)
  sys.stderr = TeeStream(original_stderr, log_file)

  return LoggerContext(
    Path(log_filepath),
    log_file,
    original_stdout,
    original_stderr,
  )


def stop_logging(
  context : Optional[LoggerContext],
) -> None:
  """
  Stop logging and restore original stdout/stderr. Safe to call twice.

  Input:
  ------
    context : LoggerContext | None
      Context object from start_logging.
  """
  if context is None:
    return

  sys.stdout = context.original_stdout
  sys.stderr = context.original_stderr

  if not context.log_file.closed:
    context.log_file.close()
