"""higgs: EVE Online static universe data loader for MongoDB."""

__version__ = "0.1.0"
