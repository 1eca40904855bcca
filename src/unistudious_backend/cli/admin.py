import click
from unistudious_backend.database import get_db, init_db
from unistudious_backend.services.provisioning import ProvisioningError, init_admin_user

@click.command()
@click.option("--email", "-e", "email", envvar="ADMIN_EMAIL", prompt=True)
@click.option("--password", "-p", "password", envvar="ADMIN_PASSWORD", prompt=True, hide_input=True)
@click.option("--username", "-u", "username", default=None)
def create(email, password, username):
  """Provision the administrator account"""

  init_db()

  with next(get_db()) as db:
    try:
      admin_user = init_admin_user(db, email=email, password=password, username=username)
    except ProvisioningError as e:
      raise click.ClickException(str(e))

    click.echo(f"Administrator {admin_user.email} ({admin_user.id}) is ready.")

@click.group()
def admin():
    pass

admin.add_command(create,"create")
