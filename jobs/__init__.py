"""Background jobs, runnable with `python -m jobs.<name>`."""
