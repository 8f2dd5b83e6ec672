from echocoach.cli.main import cli

cli()
