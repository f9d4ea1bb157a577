"""
Helper functions for formatting data into human-readable strings.
"""


def format_size(bytes_size: int) -> str:
    """Formats bytes into a human-readable size string (e.g., '145.3 MB')."""
    if bytes_size <= 0:
        return "0 B"
    units = ["B", "KB", "MB", "GB", "TB"]
    i = 0
    while bytes_size >= 1024 and i < len(units) - 1:
        bytes_size /= 1024
        i += 1
    return f"{bytes_size:.1f} {units[i]}"


def simplify_number(num: int) -> str:
    """Shortens a download count for tables (e.g., 1_234_567 -> '1 M')."""
    if num >= 1_000_000_000:
        return f"{num // 1_000_000_000} B"
    if num >= 1_000_000:
        return f"{num // 1_000_000} M"
    if num >= 1000:
        return f"{num // 1000} K"
    return str(num)


def shorten_name(name: str, max_length: int = 40) -> str:
    """Cuts long entry names down to fit a table column."""
    if len(name) < max_length:
        return name
    return name.strip()[: max_length - 2] + "…"
