import click
from unistudious_backend.database import init_db

@click.command()
def init():
    """Create all tables that do not exist yet"""
    init_db()
    click.echo("Database schema is up to date.")

@click.group()
def db():
    pass

db.add_command(init,"init")
