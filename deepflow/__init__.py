"""Track focused deep work sessions from the terminal: start, pause, log and review them."""

__version__ = "0.1.0"