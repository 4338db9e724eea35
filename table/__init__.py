from .server import HumanClient, TableServerError, TableSession, run_server

__all__ = ["HumanClient", "TableServerError", "TableSession", "run_server"]
