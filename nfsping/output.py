import click

from nfsping.rpc import RpcRejected
from nfsping.utils import us2ms

import logging
logger = logging.getLogger(__name__)


def format_result(name, seq, us, avg, loss):
    return "%s : [%d], %03.2f ms (%03.2f avg, %.0f%% loss)" % (name, seq, us2ms(us), us2ms(avg), loss)


def format_summary(target):
    stats = target.stats
    if stats.received:
        times = (us2ms(stats.min), us2ms(stats.avg), us2ms(stats.max))
    else:
        times = (0, 0, 0)
    return "%s : xmt/rcv/%%loss = %d/%d/%.0f%%, min/avg/max = %.2f/%.2f/%.2f" % (
        (target.name, stats.sent, stats.received, stats.loss) + times)


def format_history(target):
    samples = []
    for us in target.stats.history or []:
        samples.append("-" if us is None else "%.2f" % us2ms(us))
    return " ".join(["%s :" % target.name] + samples)


class Reporter:
    """
    Writes probe results to stdout and diagnostics and summaries to stderr.
    """

    def __init__(self, quiet=False, verbose=False):
        self.quiet = quiet
        self.verbose = verbose

    def result(self, target, outcome):
        stats = target.stats
        seq = stats.sent - 1
        if outcome.succeeded:
            if not self.quiet:
                click.echo(format_result(target.name, seq, outcome.latency_us, stats.avg, stats.loss))
        elif isinstance(outcome.error, RpcRejected) and target.rejected:
            logger.debug("%s : [%d] %s", target.name, seq, outcome.error)
        else:
            logger.error("%s : [%d] %s", target.name, seq, outcome.error)

    def alive(self, target):
        click.echo("%s is alive" % target.name)

    def dead(self, target):
        click.echo("%s is dead" % target.name)

    def disabled(self, target):
        logger.error("%s", target.disabled)

    def summary(self, targets):
        if not self.quiet:
            click.echo("", err=True)
        for target in targets:
            if self.verbose:
                click.echo(format_history(target), err=True)
            else:
                click.echo(format_summary(target), err=True)
