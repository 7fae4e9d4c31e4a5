import time
import socket

from nfsping.constants import FAMILIES, SOCKTYPES, NFS_PORT
from nfsping.statistics import pingStatistics
from nfsping.target import Endpoint, Target

import logging
logger = logging.getLogger(__name__)


class ResolutionError(Exception):
    pass


def now():
    return time.perf_counter()


def us2ms(us):
    return us / 1000.0


def parse_ip(name, family):
    """Return name if it is a literal address of family, otherwise None."""
    try:
        socket.inet_pton(family, name)
    except (OSError, ValueError):
        return None
    return name


def reverse_lookup(address):
    try:
        return socket.getnameinfo((address, 0), 0)[0]
    except (socket.gaierror, socket.herror) as e:
        raise ResolutionError("%s: %s" % (address, e))


def resolve_targets(names, protocol="udp", ipversion=4, port=NFS_PORT, dns=False, show_ip=False, multiple=False, history=False):
    """
    Turn target names into a list of Targets, in command line order.

    Literal addresses are used as given (reverse looked up with dns); host
    names are resolved, using the first address unless multiple is set, in
    which case every address becomes a target of its own.
    """
    family = FAMILIES[ipversion]
    targets = []

    def add(name, address):
        endpoint = Endpoint(family, address, port, protocol)
        targets.append(Target(name, endpoint, pingStatistics(history)))

    for name in names:
        address = parse_ip(name, family)
        if address:
            add(reverse_lookup(address) if dns else name, address)
            continue

        try:
            infos = socket.getaddrinfo(name, None, family, SOCKTYPES[protocol])
        except socket.gaierror as e:
            raise ResolutionError("%s: %s" % (name, e.strerror))
        except UnicodeError:
            # idna refuses empty or overlong labels before any lookup
            raise ResolutionError("%s: invalid host name" % name)

        addresses = []
        for info in infos:
            if info[4][0] not in addresses:
                addresses.append(info[4][0])
        if not addresses:
            raise ResolutionError("%s: no addresses found" % name)

        if len(addresses) > 1 and not multiple:
            logger.warning("Multiple addresses found for %s, using %s", name, addresses[0])
            addresses = addresses[:1]

        for address in addresses:
            add(address if show_ip else name, address)

    return targets
