from dataclasses import dataclass
from typing import Optional

from nfsping.rpc import RpcError, RpcRejected

import logging
logger = logging.getLogger(__name__)


@dataclass
class ProbeOutcome:
    succeeded: bool
    latency_us: Optional[int] = None
    error: Optional[RpcError] = None
    terminal: bool = False


class Prober:
    """
    Sends one NULL call to a target and accounts for the outcome.

    In one-shot mode the first outcome is terminal: statistics are left
    alone and the caller is expected to end the run.
    """

    def __init__(self, config, reporter):
        self.config = config
        self.reporter = reporter

    def probe(self, target):
        stats = target.stats
        stats.sent += 1

        try:
            outcome = ProbeOutcome(True, target.session.call_null(self.config.timeout))
        except RpcError as e:
            outcome = ProbeOutcome(False, error=e)

        if self.config.one_shot:
            outcome.terminal = True
            if outcome.succeeded:
                self.reporter.alive(target)
            else:
                self.reporter.result(target, outcome)
                self.reporter.dead(target)
            return outcome

        if outcome.succeeded:
            stats.add(outcome.latency_us)
        else:
            stats.miss()

        self.reporter.result(target, outcome)
        if isinstance(outcome.error, RpcRejected):
            target.rejected = True
        return outcome
