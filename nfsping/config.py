from dataclasses import dataclass

from nfsping.constants import (NFS_PORT, TIMEOUT_DEFAULT, RETRY_DEFAULT, WAIT_DEFAULT, SLEEP_DEFAULT,
                               VERSION_DEFAULT, PROTOCOLS, FAMILIES)


class ConfigError(ValueError):
    pass


@dataclass
class Config:
    version: int = VERSION_DEFAULT
    protocol: str = "udp"
    ipversion: int = 4
    port: int = NFS_PORT          # 0: ask the portmapper
    timeout: int = TIMEOUT_DEFAULT  # per call, ms
    retry: int = RETRY_DEFAULT      # first UDP retransmit, ms
    wait: int = WAIT_DEFAULT        # between targets, ms
    sleep: int = SLEEP_DEFAULT      # between rounds, ms
    count: int = 0                  # 0: unbounded
    loop: bool = False
    quiet: bool = False
    verbose: bool = False           # keep history, parseable summary
    dns: bool = False
    show_ip: bool = False
    multiple: bool = False

    @property
    def one_shot(self):
        return not self.count and not self.loop

    def validate(self):
        if self.version not in (2, 3):
            raise ConfigError("NFS version must be 2 or 3, not %s" % self.version)
        if self.protocol not in PROTOCOLS:
            raise ConfigError("unknown protocol %r" % self.protocol)
        if self.ipversion not in FAMILIES:
            raise ConfigError("unknown IP version %r" % self.ipversion)
        if self.timeout <= 0:
            raise ConfigError("timeout must be positive")
        if not 0 <= self.port <= 65535:
            raise ConfigError("port %d out of range" % self.port)
        for name in ("retry", "wait", "sleep", "count"):
            if getattr(self, name) < 0:
                raise ConfigError("%s can not be negative" % name)
        return self
