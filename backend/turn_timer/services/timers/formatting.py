def format_elapsed(seconds: int) -> str:
    """Render whole seconds as '{minutes}m {seconds}s', e.g. 125 -> '2m 5s'."""
    minutes, remaining = divmod(int(seconds), 60)
    return f"{minutes}m {remaining}s"
