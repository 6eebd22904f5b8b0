"""CLI entrypoint: Typer app definition and command registration"""

import typer

from metamark.cli.commands import check_cmd, export_cmd, info_cmd, parse_cmd


app = typer.Typer(name="metamark", no_args_is_help=True, help="MetaMark document parser")

app.command(name="parse")(parse_cmd)
app.command(name="check")(check_cmd)
app.command(name="export")(export_cmd)
app.command(name="info")(info_cmd)
