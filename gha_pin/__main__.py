from gha_pin.cli import cli

cli()
