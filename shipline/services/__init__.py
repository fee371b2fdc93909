"""Stage actions: each wraps one external tool."""
