"""CLI tools for CRM administration."""

import click

from crm.db.enums import Role
from crm.db.session import SessionLocal
from crm.services import pipeline_service, user_service


@click.group()
def cli():
    """CRM CLI tools."""
    pass


@cli.command()
@click.option("--name", required=True, help="Pipeline name")
@click.option("--description", default=None, help="Optional description")
def create_pipeline(name: str, description: str | None):
    """
    Create a pipeline seeded with the default stages.

    Example:
        python -m crm.cli create-pipeline --name "Vendas"
    """
    db = SessionLocal()
    try:
        pipeline = pipeline_service.create_pipeline(db, name=name, description=description)
        click.echo(f"✓ Created pipeline: {pipeline.name}")
        click.echo(f"  ID: {pipeline.id}")
        for stage in pipeline.stages:
            click.echo(f"  [{stage.position}] {stage.title}")
    except Exception as e:
        db.rollback()
        click.echo(f"❌ Error: {e}")
        raise click.exceptions.Exit(1)
    finally:
        db.close()


@cli.command()
@click.option("--user-id", required=True, help="User ID (token subject)")
@click.option(
    "--role",
    required=True,
    type=click.Choice([r.value for r in Role]),
    help="New role",
)
def set_role(user_id: str, role: str):
    """
    Change a user's role, e.g. to bootstrap the first admin.

    The user must have signed in at least once.
    """
    db = SessionLocal()
    try:
        user = user_service.update_user_role(db, user_id, Role(role))
        if not user:
            click.echo(f"❌ User {user_id} not found")
            raise click.exceptions.Exit(1)
        click.echo(f"✓ {user.email or user.id} is now {role}")
    finally:
        db.close()


@cli.command()
@click.option("--pipeline-id", required=True, type=int, help="Pipeline ID")
def list_stages(pipeline_id: int):
    """Print a pipeline's stages in board order."""
    db = SessionLocal()
    try:
        pipeline = pipeline_service.get_pipeline(db, pipeline_id)
        if not pipeline:
            click.echo(f"❌ Pipeline {pipeline_id} not found")
            raise click.exceptions.Exit(1)
        click.echo(f"{pipeline.name}:")
        for stage in pipeline_service.list_stages(db, pipeline_id):
            click.echo(f"  [{stage.position}] {stage.title} ({stage.color})")
    finally:
        db.close()


if __name__ == "__main__":
    cli()
