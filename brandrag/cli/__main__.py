"""Allow ``python -m brandrag.cli`` execution."""

from brandrag.cli.ingest import main

main()
