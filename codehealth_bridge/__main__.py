from codehealth_bridge.cli import cli

cli()
