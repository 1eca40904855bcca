import click

from .admin import admin
from .db import db
from .serve import serve

@click.group()
def cli():
    pass

cli.add_command(db,"db")
cli.add_command(admin,"admin")
cli.add_command(serve,"serve")

if __name__ == '__main__':
    cli()
