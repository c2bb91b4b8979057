"""Google Photos library browser."""
