class CommandError(ValueError):
    """A command was called with an argument outside its vocabulary."""
