from secretflare.cli.app import app

app(prog_name="secretflare")
