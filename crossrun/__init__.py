"""crossrun - run host-process JavaScript tests inside browsers."""

__version__ = "0.1.0"
