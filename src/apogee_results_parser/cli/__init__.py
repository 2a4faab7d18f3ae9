"""CLI module exports."""

from apogee_results_parser.cli.download import main as download_main
from apogee_results_parser.cli.extract import main as extract_main

__all__ = ["extract_main", "download_main"]
