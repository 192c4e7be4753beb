from memorybender.cli import cli

cli()
