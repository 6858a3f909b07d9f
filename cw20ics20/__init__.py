"""ICS20 token transfer contract logic for cw20 and native tokens, with an in-memory runtime."""

__version__ = "0.1.0"
__all__ = ["__version__"]