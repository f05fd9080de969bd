#!/usr/bin/env python3

import sys

import click

from repodriver.config import load_config, configure_logging
from repodriver.cli_utils import standard_command, add_common_options
from repodriver.drivers import DriverContext, create_driver
from repodriver.io import ConsoleIO
from repodriver.render import render_record, render_refs_table


def open_driver(url, verbose=False, no_interaction=False):
    """Load configuration and return an initialized driver for url."""
    config = load_config()
    configure_logging(config, verbose)
    interactive = not no_interaction and sys.stdin.isatty()
    context = DriverContext.from_config(config, ConsoleIO(interactive=interactive, verbose=verbose))
    return create_driver(url, context)


def _refs(mapping):
    return [{'name': name, 'commit': sha} for name, sha in mapping.items()]


@click.group()
@click.version_option(package_name='repodriver')
def cli():
    """repodriver - Repository metadata through hosting APIs or git.

    Resolves default branches, lists tags and branches, and reads the
    dependency manifest of any reference of a repository.
    """
    pass


@cli.command('info')
@click.argument('url')
@add_common_options('verbose', 'no_interaction', 'pretty')
@standard_command
def info_handler(url, verbose, no_interaction, pretty):
    """Show which driver handles URL and its default branch."""
    driver = open_driver(url, verbose, no_interaction)
    result = {
        'url': driver.get_url(),
        'driver': type(driver).__name__,
        'root_identifier': driver.get_root_identifier(),
        'private': getattr(driver, 'is_private', False),
        'delegated': getattr(driver, 'git_driver', None) is not None,
    }
    if pretty:
        render_record(result, title=url)
        return None
    return result


@cli.command('tags')
@click.argument('url')
@add_common_options('verbose', 'no_interaction', 'pretty')
@standard_command
def tags_handler(url, verbose, no_interaction, pretty):
    """List tags of URL with the commit each points at."""
    refs = _refs(open_driver(url, verbose, no_interaction).get_tags())
    if pretty:
        render_refs_table(refs, title=f"Tags of {url}")
        return None
    return refs


@cli.command('branches')
@click.argument('url')
@add_common_options('verbose', 'no_interaction', 'pretty')
@standard_command
def branches_handler(url, verbose, no_interaction, pretty):
    """List branches of URL with their head commit."""
    refs = _refs(open_driver(url, verbose, no_interaction).get_branches())
    if pretty:
        render_refs_table(refs, title=f"Branches of {url}")
        return None
    return refs


@cli.command('source')
@click.argument('url')
@click.argument('ref')
@add_common_options('verbose', 'no_interaction')
@standard_command
def source_handler(url, ref, verbose, no_interaction):
    """Show where to clone REF of URL from."""
    return open_driver(url, verbose, no_interaction).get_source(ref).to_dict()


@cli.command('dist')
@click.argument('url')
@click.argument('ref')
@add_common_options('verbose', 'no_interaction')
@standard_command
def dist_handler(url, ref, verbose, no_interaction):
    """Show where to download an archive of REF of URL."""
    dist = open_driver(url, verbose, no_interaction).get_dist(ref)
    return dist.to_dict() if dist else {'dist': None}


@cli.command('manifest')
@click.argument('url')
@click.argument('ref', required=False)
@add_common_options('verbose', 'no_interaction', 'pretty')
@standard_command
def manifest_handler(url, ref, verbose, no_interaction, pretty):
    """Show the manifest at REF of URL (default branch when omitted)."""
    driver = open_driver(url, verbose, no_interaction)
    ref = ref or driver.get_root_identifier()
    manifest = driver.get_manifest(ref)
    if manifest is None:
        return {'reference': ref, 'manifest': None}
    if pretty:
        render_record(manifest, title=f"{url}@{ref}")
        return None
    return manifest


def main():
    """Main entry point for the CLI."""
    return cli()


if __name__ == '__main__':
    main()
