import enum
import time
from dataclasses import dataclass

from nfsping.constants import EXIT_SUCCESS, EXIT_FAILURE
from nfsping.prober import Prober
from nfsping.rpc import TransportSetupError
from nfsping.session import open_session
from nfsping.utils import now

import logging
logger = logging.getLogger(__name__)


class State(enum.Enum):
    RUNNING = "running"
    TARGET_WAIT = "target_wait"
    ROUND_WAIT = "round_wait"
    TERMINATED = "terminated"


@dataclass
class RunResult:
    status: int
    rounds: int = 0
    one_shot: bool = False


class RoundScheduler:
    """
    Probes every target once per round, in order, until the count is
    reached, the run is stopped, or a one-shot probe decides the outcome.
    """

    def __init__(self, targets, config, reporter, connect=open_session):
        self.targets = targets
        self.config = config
        self.reporter = reporter
        self.prober = Prober(config, reporter)
        self.connect = connect
        self.running = True
        self.state = State.TERMINATED
        self.rounds = 0

    def stop(self, signum=None, frame=None):
        # installed as the SIGINT handler, so it only flips the flag
        self.running = False

    def setup(self):
        for target in self.targets:
            try:
                target.session = self.connect(target.endpoint, self.config.version, self.config.timeout, self.config.retry)
            except TransportSetupError as e:
                target.disabled = str(e)
                self.reporter.disabled(target)

    def close(self):
        for target in self.targets:
            if target.session is not None:
                target.session.close()

    def pause(self, state, ms):
        self.state = state
        until = now() + ms / 1000.0
        while self.running and now() < until:
            time.sleep(max(0, min(0.1, until - now())))

    def done(self, active):
        if not self.running:
            return True
        return bool(self.config.count) and active[0].stats.sent >= self.config.count

    def run(self):
        self.setup()
        try:
            return self.loop()
        finally:
            self.close()
            self.state = State.TERMINATED

    def loop(self):
        active = [target for target in self.targets if target.active]
        failed = len(active) < len(self.targets)
        if not active:
            return RunResult(EXIT_FAILURE, one_shot=self.config.one_shot)
        if failed and self.config.one_shot:
            # no alive/dead verdict when a target could not even be set up
            return RunResult(EXIT_FAILURE, one_shot=True)

        while self.running:
            self.state = State.RUNNING
            for index, target in enumerate(active):
                outcome = self.prober.probe(target)
                if outcome.terminal:
                    status = EXIT_SUCCESS if outcome.succeeded else EXIT_FAILURE
                    return RunResult(status, self.rounds, one_shot=True)
                if index < len(active) - 1:
                    self.pause(State.TARGET_WAIT, self.config.wait)
            self.rounds += 1

            if self.done(active):
                break
            self.pause(State.ROUND_WAIT, self.config.sleep)

        self.reporter.summary(self.targets)
        return RunResult(EXIT_FAILURE if failed else EXIT_SUCCESS, self.rounds)
