# -*- coding: utf-8 -*-

# Copyright Noronha Development Team
#
# Licensed under the Apache License, Version 2.0 (the "License");
# you may not use this file except in compliance with the License.
# You may obtain a copy of the License at
#
#     http://www.apache.org/licenses/LICENSE-2.0
#
# Unless required by applicable law or agreed to in writing, software
# distributed under the License is distributed on an "AS IS" BASIS,
# WITHOUT WARRANTIES OR CONDITIONS OF ANY KIND, either express or implied.
# See the License for the specific language governing permissions and
# limitations under the License.

import click
from importlib import metadata

from tender.api.stack import StackAPI as API
from tender.cli.callback import ListingCallback
from tender.cli.handler import CommandHandler as CMD
from tender.common.constants import FrameworkConst
from tender.common.logging import LoggerHub, LOG


@click.group()
@click.option('--file', '-f', 'file', default=None, type=str, help="Path to the declaration file (default: tenderfile.py)")
@click.option('--skip-questions', '-s', default=False, type=bool, is_flag=True, help="Skip questions")
@click.option('--log-level', '-l', default='INFO', type=str, help="Level of log verbosity (DEBUG, INFO, WARN, ERROR)")
@click.option('--debug', '-d', default=False, type=bool, is_flag=True, help="Set log level to DEBUG")
@click.option('--pretty', '-p', default=False, type=bool, is_flag=True, help="Less compact, more readable output")
@click.option('--background', '-b', default=False, type=bool, is_flag=True, help="Only log to files")
@click.pass_context
def tender(_, file: str, skip_questions: bool, log_level: str, debug: bool, pretty: bool, background: bool):
    
    """Run commands among the containerized services they depend on"""
    
    CMD.interactive_mode = not skip_questions
    CMD.declaration_file = file
    
    if debug:
        log_level = 'DEBUG'
    
    LoggerHub.configure('level', log_level)
    LoggerHub.configure('pretty', pretty)
    LoggerHub.configure('background', background)


@click.command(context_settings=dict(ignore_unknown_options=True, allow_interspersed_args=False))
@click.option('--store', help="Name of the store where the settings of the services are kept between runs")
@click.argument('cmd', nargs=-1, required=True, type=click.UNPROCESSED)
def run(**kwargs):
    
    """Start the declared services, then run a command among them"""
    
    CMD.run(API, 'run', _exit_with_response=True, **kwargs)


@click.command()
def stores():
    
    """List the stores of the declared project"""
    
    CMD.run(API, 'stores', _response_callback=ListingCallback('store'))


@click.command()
@click.option('--store', help="Name of the store")
def show(**kwargs):
    
    """Show the connection settings of the services in a store"""
    
    CMD.run(API, 'show', **kwargs)


@click.command(context_settings=dict(ignore_unknown_options=True))
@click.option('--store', help="Name of the store")
@click.argument('instance')
@click.argument('tool')
@click.argument('args', nargs=-1, type=click.UNPROCESSED)
def tool(**kwargs):
    
    """Launch a client tool against a service, using the settings in a store"""
    
    CMD.run(API, 'tool', _exit_with_response=True, **kwargs)


@click.command()
@click.option('--store', help="Name of the store")
def delete(**kwargs):
    
    """Remove a store, along with the data of its services"""
    
    CMD.run(API, 'delete', **kwargs)


@click.command()
def version():
    
    """Framework's version"""
    
    LOG.echo("Tender v%s" % FrameworkConst.FW_VERSION)
    
    try:
        meta = metadata.metadata(FrameworkConst.FW_NAME)
    except metadata.PackageNotFoundError:
        return
    
    for key in ('Summary', 'Home-page', 'License'):
        if meta.get(key):
            LOG.info('{}: {}'.format(key, meta.get(key)))


commands = [
    run,
    stores,
    show,
    tool,
    delete,
    version
]

for cmd in commands:
    tender.add_command(cmd)


def main():
    
    tender(obj={})
