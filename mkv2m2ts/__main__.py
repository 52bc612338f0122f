from mkv2m2ts.cli import app

app(prog_name="mkv2m2ts")
