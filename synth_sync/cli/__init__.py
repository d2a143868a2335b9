"""
Command-line interface: the Typer app, Rich formatters and progress display.
"""
