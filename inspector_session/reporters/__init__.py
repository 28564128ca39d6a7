"""Reporters - Command logging, script generation and replay."""

from inspector_session.reporters.command_recorder import CommandRecorder
from inspector_session.reporters.session_replayer import SessionReplayer

__all__ = ["CommandRecorder", "SessionReplayer"]
