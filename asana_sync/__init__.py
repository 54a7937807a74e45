"""asana-sync: keep Asana tasks in step with GitHub issues, pull requests and pushes."""

__version__ = "1.0.0"
