import socket
from dataclasses import dataclass, field, replace
from typing import Optional

from nfsping.statistics import pingStatistics


@dataclass(frozen=True)
class Endpoint:
    family: int
    address: str
    port: int
    protocol: str = "udp"

    def with_port(self, port):
        return replace(self, port=port)

    def __str__(self):
        if self.family == socket.AF_INET6:
            return "[%s]:%d/%s" % (self.address, self.port, self.protocol)
        return "%s:%d/%s" % (self.address, self.port, self.protocol)


@dataclass
class Target:
    name: str
    endpoint: Endpoint
    stats: pingStatistics = field(default_factory=pingStatistics)
    session: object = None
    disabled: Optional[str] = None
    rejected: bool = False

    @property
    def active(self):
        return self.disabled is None
