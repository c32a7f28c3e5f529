class StoreError(Exception):
    """Raised when the ephemeral store cannot be reached or rejects a command."""
