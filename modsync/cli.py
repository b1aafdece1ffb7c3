"""Click-based CLI for MODSYNC - Module history sync."""

from __future__ import annotations

import sys
from pathlib import Path
from typing import Optional

import click
import yaml
from pydantic import ValidationError

from modsync import __version__
from modsync.config import (
    ensure_config_exists,
    generate_default_config,
    get_config_path,
    load_config,
    validate_config_file,
)
from modsync.config.schema import ModsyncConfig
from modsync.git import GitError, Repository
from modsync.logger import SyncLogger
from modsync.module import ModuleConfigError, ModuleIdentity, parse_module_config
from modsync.output import create_console
from modsync.registry import (
    LocalRegistry,
    RegistryError,
    Visibility,
    module_default_branch_getter,
    push_or_create,
    sync_point_resolver,
    synced_git_commit_checker,
)
from modsync.storage import GitStorageProvider
from modsync.sync import (
    InvalidModuleError,
    LoggingErrorHandler,
    Module,
    ModuleCommit,
    SyncError,
    Syncer,
    SyncerConfigBuilder,
)

VISIBILITIES = [v.value for v in Visibility]


def _load_config_or_exit(config_path: Optional[Path]) -> ModsyncConfig:
    try:
        return load_config(config_path)
    except (FileNotFoundError, ValidationError, yaml.YAMLError) as e:
        create_console(stderr=True).print_error(str(e))
        sys.exit(1)


@click.group()
@click.version_option(version=__version__, prog_name="modsync")
def cli() -> None:
    """MODSYNC - Module history sync for Git repositories.

    Replays the commits of modules in a Git repository into a module
    registry, in topological order, resuming where the last run stopped.

    \b
    Workflows:
      modsync sync -m proto:buf.build/acme/petapis   Sync the checked out branch
      modsync sync --all-branches                    Sync every pushed branch
      modsync status                                 Show sync points
    """
    pass


@cli.command()
@click.option(
    "--module",
    "-m",
    "module_args",
    multiple=True,
    metavar="DIR:IDENTITY",
    help="Module to sync: <module-path>:<module-name>. The path is relative to the repository root, "
    "the name is the module's fully qualified name, e.g. buf.build/acme/petapis. "
    "Can be given multiple times; overrides the modules of the config file.",
)
@click.option(
    "--all-branches",
    is_flag=True,
    help="Sync all branches pushed to the remote, not only the checked out one. "
    "The remote's default branch (refs/remotes/<remote>/HEAD) is synced first, "
    "then the rest in lexicographic order.",
)
@click.option("--create", is_flag=True, help="Create module repositories that do not exist. Requires --create-visibility.")
@click.option(
    "--create-visibility",
    type=click.Choice(VISIBILITIES),
    default=None,
    help="Visibility of created module repositories.",
)
@click.option("--registry", "registry_path", type=click.Path(path_type=Path), help="Registry directory")
@click.option("--remote", default=None, help="Remote whose branches are synced (default: origin)")
@click.option("--config", "config_path", type=click.Path(path_type=Path), help="Configuration file")
@click.option("--verbose", "-v", is_flag=True, help="Show detailed output")
def sync(
    module_args: tuple[str, ...],
    all_branches: bool,
    create: bool,
    create_visibility: Optional[str],
    registry_path: Optional[Path],
    remote: Optional[str],
    config_path: Optional[Path],
    verbose: bool,
) -> None:
    """Sync a Git repository's module commits to the registry.

    Only commits pushed to the remote are processed. Commits whose module is
    missing, invalid or fails to build are reported and skipped.

    \b
    Examples:
      modsync sync -m proto:buf.build/acme/petapis
      modsync sync -m proto:buf.build/acme/petapis --create --create-visibility private
    """
    if create_visibility is not None and not create:
        raise click.UsageError("Cannot set --create-visibility without --create.")
    if create and create_visibility is None:
        raise click.UsageError("--create-visibility is required if --create is set.")

    config = _load_config_or_exit(config_path)
    console = create_console(colored=config.output.colored, stderr=True)
    sync_logger = SyncLogger(console.rich, verbose=verbose or config.output.verbose)

    try:
        if module_args:
            modules = [Module.parse(arg, require_identity=True) for arg in module_args]
        else:
            modules = config.get_modules()
    except InvalidModuleError as e:
        raise click.UsageError(str(e))

    if not modules:
        sync_logger.info("no modules to sync")
        return

    visibility: Optional[Visibility] = None
    if create_visibility is not None:
        visibility = Visibility(create_visibility)
    elif config.registry.create_visibility is not None:
        visibility = config.registry.create_visibility

    registry = LocalRegistry(registry_path.expanduser() if registry_path else Path(config.registry.path))
    builder = (
        SyncerConfigBuilder()
        .with_resumption(sync_point_resolver(registry))
        .with_commit_checker(synced_git_commit_checker(registry))
        .with_default_branch_getter(module_default_branch_getter(registry))
        .with_all_branches(all_branches or config.all_branches)
    )
    try:
        for module in modules:
            builder.with_module(module)
    except InvalidModuleError as e:
        raise click.UsageError(str(e))

    synced = 0

    def push(module_commit: ModuleCommit) -> None:
        nonlocal synced
        try:
            sync_point = push_or_create(
                registry,
                module_commit,
                create_visibility=visibility,
                default_branch=default_branch,
            )
        except RegistryError as e:
            raise SyncError(
                f"failed to push or create {module_commit.identity} at {module_commit.commit.hash}: {e}"
            ) from e
        sync_logger.synced(
            module_commit.branch,
            module_commit.commit.hash,
            str(module_commit.identity),
            sync_point.registry_commit_name,
        )
        synced += 1

    try:
        repository = Repository.open(remote=remote or config.git.remote)
        default_branch = repository.default_branch()
        syncer = Syncer(
            repository,
            GitStorageProvider(repository, symlinks=True),
            LoggingErrorHandler(sync_logger),
            builder.build(),
            logger=sync_logger,
        )
        syncer.sync(push)
    except (SyncError, GitError, RegistryError) as e:
        sync_logger.error(str(e))
        sys.exit(1)

    sync_logger.success(f"Synced {synced} commit(s)")


@cli.command()
@click.option("--registry", "registry_path", type=click.Path(path_type=Path), help="Registry directory")
@click.option("--remote", default=None, help="Remote whose branches are listed (default: origin)")
@click.option("--config", "config_path", type=click.Path(path_type=Path), help="Configuration file")
def status(registry_path: Optional[Path], remote: Optional[str], config_path: Optional[Path]) -> None:
    """Show the last synced commit of each configured module per remote branch.

    \b
    Examples:
      modsync status
      modsync status --registry ./registry
    """
    config = _load_config_or_exit(config_path)
    console = create_console(colored=config.output.colored)
    registry = LocalRegistry(registry_path.expanduser() if registry_path else Path(config.registry.path))

    try:
        repository = Repository.open(remote=remote or config.git.remote)
        provider = GitStorageProvider(repository)
        rows: list[tuple[str, str, str, Optional[str]]] = []
        for module in config.get_modules():
            for branch in repository.remote_branches():
                identity = module.identity_override or _declared_identity(provider, repository, module, branch)
                if identity is None:
                    rows.append((str(module), "?", branch, None))
                    continue
                rows.append((str(module), str(identity), branch, registry.get_sync_point(identity, branch)))
    except (GitError, RegistryError) as e:
        console.print_error(str(e))
        sys.exit(1)

    console.print_sync_points(rows)


def _declared_identity(
    provider: GitStorageProvider,
    repository: Repository,
    module: Module,
    branch: str,
) -> Optional[ModuleIdentity]:
    head = repository.branch_head(branch)
    if head is None:
        return None
    with provider.snapshot(head, module.dir) as bucket:
        try:
            return parse_module_config(bucket).identity
        except ModuleConfigError:
            return None


@cli.group("config")
def config_group() -> None:
    """Manage the MODSYNC configuration file."""
    pass


@config_group.command("init")
@click.option("--config", "config_path", type=click.Path(path_type=Path), help="Configuration file")
def config_init(config_path: Optional[Path]) -> None:
    """Create a default configuration file."""
    console = create_console()
    path, created = ensure_config_exists(config_path)
    if created:
        console.print_success(f"Created configuration: {path}")
    else:
        console.print_info(f"Configuration already exists: {path}")


@config_group.command("show")
@click.option("--config", "config_path", type=click.Path(path_type=Path), help="Configuration file")
def config_show(config_path: Optional[Path]) -> None:
    """Show the effective configuration."""
    config = _load_config_or_exit(config_path)
    data = config.model_dump(exclude_none=True, mode="json")
    click.echo(f"# {config_path or get_config_path()}")
    click.echo(yaml.dump(data, default_flow_style=False, sort_keys=False, allow_unicode=True), nl=False)


@config_group.command("validate")
@click.option("--config", "config_path", type=click.Path(path_type=Path), help="Configuration file")
def config_validate(config_path: Optional[Path]) -> None:
    """Validate a configuration file."""
    console = create_console()
    valid, errors = validate_config_file(config_path)
    if not valid:
        console.print_config_errors(errors)
        sys.exit(1)
    console.print_success("Configuration is valid")


@config_group.command("template")
def config_template() -> None:
    """Print the default configuration template."""
    click.echo(generate_default_config(), nl=False)


if __name__ == "__main__":
    cli()
