"""Main CLI application using Cyclopts."""

import cyclopts

from tessera.cli.commands import accounts, server

app = cyclopts.App(
    name="tessera",
    help="Tessera - passwordless sessions and conditional responses",
)

app.command(server.app, name="server")
app.command(accounts.app, name="accounts")


def main() -> None:
    app()
