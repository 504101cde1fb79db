"""salvo: grid combat engine with a hunt/target opponent."""

__version__ = "0.1.0"
