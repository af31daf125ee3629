"""tasktrack: task-list query, filter and pagination engine for a multi-user task tracker."""

__version__ = "0.1.0"
