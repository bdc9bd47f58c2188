"""Main CLI entry point for hetzner-kube."""

from pathlib import Path

import typer
from rich.console import Console
from rich.table import Table

from hetzner_kube.config import DEFAULT_CONFIG_PATH, TOKEN_ENV_VAR, ProvisionerSettings
from hetzner_kube.exceptions import HetznerKubeError
from hetzner_kube.logging_config import get_logger, setup_logging
from hetzner_kube.models.cluster import AppConfig, Cluster

app = typer.Typer(
    name="hetzner-kube",
    help="Provision Kubernetes cluster nodes on Hetzner Cloud",
    add_completion=False,
)
cluster_app = typer.Typer(help="Create and list clusters", add_completion=False)
app.add_typer(cluster_app, name="cluster")

console = Console()
logger = get_logger(__name__)


@app.callback()
def main_callback(
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Enable verbose logging"),
    log_level: str = typer.Option(
        "WARNING", "--log-level", help="Console log level (DEBUG, INFO, WARNING, ERROR, CRITICAL)"
    ),
    log_file: str | None = typer.Option(None, "--log-file", help="Path to log file"),
):
    """Global options for all commands."""
    log_path = Path(log_file) if log_file else None
    try:
        setup_logging(level=log_level, log_file=log_path, verbose=verbose)
    except HetznerKubeError as e:
        _fail(e)
    logger.debug("Logging initialized")


@app.command()
def version() -> None:
    """Show version information."""
    from hetzner_kube import __version__

    typer.echo(f"hetzner-kube version {__version__}")


def list_clusters(
    config_path: str = typer.Option(
        str(DEFAULT_CONFIG_PATH), "--config", "-c", help="Path to the cluster config file"
    ),
) -> None:
    """List all created clusters."""
    try:
        app_config = AppConfig.load(config_path)
    except HetznerKubeError as e:
        _fail(e)

    table = Table()
    table.add_column("NAME", style="cyan")
    table.add_column("NODES", style="magenta")
    table.add_column("MASTER IP", style="yellow")

    for cluster in app_config.clusters:
        table.add_row(cluster.name, str(cluster.node_count), cluster.master_ip)

    console.print(table)


cluster_app.command("list")(list_clusters)
cluster_app.command("ls", hidden=True)(list_clusters)


@cluster_app.command("create")
def create_cluster(
    name: str = typer.Option(..., "--name", "-n", help="Name of the cluster"),
    ssh_key: str = typer.Option(..., "--ssh-key", "-k", help="Name of the SSH key to use"),
    master_type: str = typer.Option("cx11", "--master-server-type", help="Master server type"),
    worker_type: str = typer.Option("cx11", "--worker-server-type", help="Worker server type"),
    datacenters: list[str] = typer.Option(
        ["fsn1", "nbg1"], "--datacenter", "-d", help="Placement zone (repeatable)"
    ),
    masters: int = typer.Option(1, "--master-count", "-m", min=1, help="Number of masters"),
    etcd_nodes: int = typer.Option(
        0, "--etcd-count", "-e", min=0, help="Dedicated etcd nodes (0 runs etcd on masters)"
    ),
    workers: int = typer.Option(1, "--worker-count", "-w", min=0, help="Number of workers"),
    cloud_init: str | None = typer.Option(None, "--cloud-init", help="Cloud-init file"),
    token: str | None = typer.Option(
        None, "--token", envvar=TOKEN_ENV_VAR, help="Hetzner Cloud API token"
    ),
    config_path: str = typer.Option(
        str(DEFAULT_CONFIG_PATH), "--config", "-c", help="Path to the cluster config file"
    ),
) -> None:
    """
    Create the nodes of a new cluster.

    Nodes that already exist under the same name are reused, so a failed
    run can be repeated with the same options.
    """
    from hetzner_kube.cluster_provider import HetznerProvider
    from hetzner_kube.provider.hetzner import HetznerClient

    try:
        app_config = AppConfig.load(config_path)
        settings = ProvisionerSettings.from_env(token=token, cloud_init_file=cloud_init)
        provider = HetznerProvider(
            name, HetznerClient(settings.require_token()), settings, console=console
        )

        if etcd_nodes > 0:
            console.print(f"[bold]Creating {etcd_nodes} etcd nodes...[/bold]")
            provider.create_etcd_nodes(ssh_key, master_type, datacenters, etcd_nodes)
        console.print(f"[bold]Creating {masters} master nodes...[/bold]")
        provider.create_master_nodes(ssh_key, master_type, datacenters, masters, etcd_nodes == 0)
        if workers > 0:
            console.print(f"[bold]Creating {workers} worker nodes...[/bold]")
            provider.create_worker_nodes(ssh_key, worker_type, datacenters, workers, 0)

        cluster = provider.get_cluster()
        app_config.upsert_cluster(cluster)
        app_config.save(config_path)
    except HetznerKubeError as e:
        _fail(e)

    _print_nodes(cluster)
    if provider.must_wait():
        console.print("\n[yellow]New servers were created; allow them a moment to boot.[/yellow]")


@cluster_app.command("add-workers")
def add_workers(
    name: str = typer.Option(..., "--name", "-n", help="Name of the cluster"),
    count: int = typer.Option(1, "--worker-count", "-w", min=1, help="Workers to add"),
    worker_type: str = typer.Option("cx11", "--worker-server-type", help="Worker server type"),
    datacenters: list[str] = typer.Option(
        ["fsn1", "nbg1"], "--datacenter", "-d", help="Placement zone (repeatable)"
    ),
    token: str | None = typer.Option(
        None, "--token", envvar=TOKEN_ENV_VAR, help="Hetzner Cloud API token"
    ),
    config_path: str = typer.Option(
        str(DEFAULT_CONFIG_PATH), "--config", "-c", help="Path to the cluster config file"
    ),
) -> None:
    """Add worker nodes to an existing cluster, numbered after the current workers."""
    from hetzner_kube.cluster_provider import HetznerProvider
    from hetzner_kube.provider.hetzner import HetznerClient

    try:
        app_config = AppConfig.load(config_path)
        existing = app_config.get_cluster(name)
        if existing is None:
            console.print(f"[red]Error:[/red] Cluster '{name}' not found in {config_path}")
            raise typer.Exit(code=1)

        settings = ProvisionerSettings.from_env(token=token)
        provider = HetznerProvider(
            name, HetznerClient(settings.require_token()), settings, console=console
        )
        provider.set_nodes(list(existing.nodes))
        ssh_key = provider.get_master_node().ssh_key_name
        offset = len(provider.get_worker_nodes())

        provider.create_worker_nodes(ssh_key, worker_type, datacenters, count, offset)

        cluster = provider.get_cluster()
        app_config.upsert_cluster(cluster)
        app_config.save(config_path)
    except HetznerKubeError as e:
        _fail(e)

    _print_nodes(cluster)


def _print_nodes(cluster: Cluster) -> None:
    table = Table(title=f"Cluster {cluster.name}")
    table.add_column("Name", style="cyan")
    table.add_column("Role", style="magenta")
    table.add_column("Type")
    table.add_column("Public IP", style="yellow")
    table.add_column("Private IP", style="green")

    for node in cluster.nodes:
        table.add_row(
            node.name, node.role, node.type, str(node.ip_address), str(node.private_ip_address)
        )

    console.print(table)


def _fail(error: HetznerKubeError) -> None:
    logger.error(f"{type(error).__name__}: {error.message}")
    console.print(f"[red]Error:[/red] {error.message}")
    if error.details:
        console.print(f"\n{error.details}")
    raise typer.Exit(code=1)


if __name__ == "__main__":
    app()
