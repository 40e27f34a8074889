"""Command line interface for the nupkg remote file service."""
