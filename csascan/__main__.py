from csascan.cli import app

app()
