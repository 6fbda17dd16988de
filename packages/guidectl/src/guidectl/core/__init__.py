"""Runtime context, errors, logging and filesystem helpers."""
