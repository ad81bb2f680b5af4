"""Command line entry points for nav2d."""
