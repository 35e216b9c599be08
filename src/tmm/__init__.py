"""
tmm - tmux session manager.

Opens, creates, renames and removes tmux sessions, and lets automated
agents run commands in a session pane and read back the new output.
"""

__version__ = "0.3.0"
