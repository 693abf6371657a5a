"""Search MOEX securities and save traded ones as CSV files."""

__version__ = "0.1.0"
