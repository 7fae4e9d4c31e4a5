import struct

from nfsping.constants import PMAPPROC_GETPORT, PROTOCOLS
from nfsping.rpc import MalformedReply


def getport(session, program, version, protocol):
    """
    Ask the portmapper behind session which port serves program/version.

    Returns 0 when the program is not registered.
    """
    args = struct.pack('!4I', program, version, PROTOCOLS[protocol], 0)
    results = session.call(PMAPPROC_GETPORT, args)[0]
    if len(results) < 4:
        raise MalformedReply("short GETPORT result: %d bytes" % len(results))
    return struct.unpack('!I', results[0:4])[0]
