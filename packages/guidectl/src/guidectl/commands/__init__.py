"""Command implementations wired into the argparse surface in ``guidectl.cli``."""
