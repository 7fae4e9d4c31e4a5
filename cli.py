#!/usr/bin/env python3

from nfsping.config import Config, ConfigError
from nfsping.constants import (NFS_PORT, TIMEOUT_DEFAULT, RETRY_DEFAULT, WAIT_DEFAULT, SLEEP_DEFAULT,
                               EXIT_SUCCESS, EXIT_FAILURE, EXIT_USAGE)
from nfsping.output import Reporter
from nfsping.scheduler import RoundScheduler
from nfsping.utils import ResolutionError, resolve_targets

import click
import click_log
import signal
import sys
import functools

from logging.handlers import TimedRotatingFileHandler


import logging
logger = logging.getLogger("nfsping")
click_logger = click_log.basic_config(logger)


class NfspingCommand(click.Command):
    """
    Turns the callback's return value into the process exit status and
    reports usage errors with EXIT_USAGE.
    """

    def main(self, args=None, prog_name=None, **extra):
        extra.pop("standalone_mode", None)
        try:
            rv = click.Command.main(self, args, prog_name, standalone_mode=False, **extra)
        except click.UsageError as e:
            e.show()
            sys.exit(EXIT_USAGE)
        except click.ClickException as e:
            e.show()
            sys.exit(e.exit_code)
        except click.Abort:
            click.echo("Aborted!", err=True)
            sys.exit(EXIT_FAILURE)
        sys.exit(rv or EXIT_SUCCESS)


def rpc_options(func):
    @click.option("-2", "v2", is_flag=True, help="use NFS version 2 (default 3)")
    @click.option("-6", "ipv6", is_flag=True, help="use IPv6 (default IPv4)")
    @click.option("-T", "tcp", is_flag=True, help="use TCP (default UDP)")
    @click.option("-M", "portmapper", is_flag=True, help="use the portmapper to find the NFS port")
    @click.option("-P", "port", metavar="n", default=NFS_PORT, type=click.IntRange(1, 65535), help="NFS port (default %d)" % NFS_PORT)
    @click.option("-t", "timeout", metavar="ms", default=TIMEOUT_DEFAULT, type=click.IntRange(min=1), help="timeout (default %d)" % TIMEOUT_DEFAULT)
    @click.option("--retry", "retry", metavar="ms", default=RETRY_DEFAULT, type=click.IntRange(min=0), help="first UDP retransmit, doubled each time, 0 disables (default %d)" % RETRY_DEFAULT)
    @functools.wraps(func)
    def wrapper(*args, **kwargs):
        return func(*args, **kwargs)
    return wrapper


def pacing_options(func):
    @click.option("-c", "count", metavar="n", type=click.IntRange(min=1), help="count of pings to send to target")
    @click.option("-C", "parseable", metavar="n", type=click.IntRange(min=1), help="same as -c, output parseable format")
    @click.option("-i", "wait", metavar="ms", default=WAIT_DEFAULT, type=click.IntRange(min=0), help="interval between targets (default %d)" % WAIT_DEFAULT)
    @click.option("-p", "sleep", metavar="ms", default=SLEEP_DEFAULT, type=click.IntRange(min=0), help="pause between pings to target (default %d)" % SLEEP_DEFAULT)
    @click.option("-l", "loop", is_flag=True, help="loop forever")
    @functools.wraps(func)
    def wrapper(*args, **kwargs):
        return func(*args, **kwargs)
    return wrapper


def target_options(func):
    @click.option("-A", "show_ip", is_flag=True, help="show IP addresses")
    @click.option("-d", "dns", is_flag=True, help="reverse DNS lookups for targets")
    @click.option("-m", "multiple", is_flag=True, help="use multiple target IP addresses if found")
    @functools.wraps(func)
    def wrapper(*args, **kwargs):
        return func(*args, **kwargs)
    return wrapper


@click.command(cls=NfspingCommand, context_settings={"help_option_names": ["-h", "--help"]})
@click.argument("targets", metavar="[targets...]", nargs=-1, required=True)
@rpc_options
@pacing_options
@target_options
@click.option("-q", "quiet", is_flag=True, help="quiet, only print summary")
@click.option("--logfile", "logfile", type=click.Path())
@click_log.simple_verbosity_option(logger)
def cli(targets, v2, ipv6, tcp, portmapper, port, timeout, retry, count, parseable, wait, sleep, loop,
        show_ip, dns, multiple, quiet, logfile):
    """Ping NFS servers by calling the NULL procedure of the NFS RPC program."""

    if logfile:
        file_handler = TimedRotatingFileHandler(
            filename=logfile, when='midnight', backupCount=31)
        file_handler.setFormatter(logging.Formatter(
            '%(asctime)s - %(name)s - %(levelname)s - %(message)s'))
        file_handler.setLevel(logger.level)
        click_logger.addHandler(file_handler)

    config = Config(
        version=2 if v2 else 3,
        protocol="tcp" if tcp else "udp",
        ipversion=6 if ipv6 else 4,
        port=0 if portmapper else port,
        timeout=timeout,
        retry=retry,
        wait=wait,
        sleep=sleep,
        count=parseable or count or 0,
        loop=loop,
        quiet=quiet,
        verbose=bool(parseable),
        dns=dns,
        show_ip=show_ip,
        multiple=multiple)
    try:
        config.validate()
    except ConfigError as e:
        raise click.UsageError(str(e))

    try:
        nfs_targets = resolve_targets(targets, config.protocol, config.ipversion, config.port,
                                      dns=config.dns, show_ip=config.show_ip, multiple=config.multiple,
                                      history=config.verbose)
    except ResolutionError as e:
        logger.error("%s", e)
        return EXIT_FAILURE

    scheduler = RoundScheduler(nfs_targets, config, Reporter(config.quiet, config.verbose))

    previous = signal.signal(signal.SIGINT, scheduler.stop)
    try:
        result = scheduler.run()
    finally:
        signal.signal(signal.SIGINT, previous)

    logger.debug("finished after %d rounds with status %d", result.rounds, result.status)
    return result.status


if __name__ == "__main__":
    cli()
