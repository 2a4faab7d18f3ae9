"""CLI entrypoint for downloading one results page."""

from apogee_results_parser.download.apogee import main

if __name__ == "__main__":
    main()
