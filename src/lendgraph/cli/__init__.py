import click


@click.group()
@click.version_option(package_name="lendgraph")
def cli() -> None: ...


from . import database, project  # noqa: F401, E402
