"""Command line interface (`fiql`)."""
