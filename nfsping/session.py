import binascii
import random
import select
import socket

from nfsping.constants import (NFS_PROGRAM, NFSPROC_NULL, PMAP_PROGRAM, PMAP_VERSION, PMAP_PORT,
                               TIMEOUT_DEFAULT, RETRY_DEFAULT, VERSION_DEFAULT, BUFSIZE)
from nfsping.portmap import getport
from nfsping.rpc import (CallTimeout, ConnectionLost, MalformedReply, RpcError, TransportSetupError,
                         pack_call, record, fragment_header, reply_xid, unpack_reply)
from nfsping.utils import now

import logging
logger = logging.getLogger(__name__)


class rpcSession:
    """
    Client side of one RPC program/version on one endpoint.

    Subclasses implement connect() and exchange(); call() takes care of
    transaction ids and timing.
    """

    def __init__(self, endpoint, program=NFS_PROGRAM, version=VERSION_DEFAULT, timeout=TIMEOUT_DEFAULT, retry=RETRY_DEFAULT):
        self.endpoint = endpoint
        self.program = program
        self.version = version
        self.timeout = timeout
        self.retry = retry
        self.socket = None
        self.xid = random.getrandbits(32)

    def next_xid(self):
        self.xid = (self.xid + 1) & 0xffffffff
        return self.xid

    def call(self, procedure, args=b'', timeout=None):
        """
        Send one call and wait for its reply.

        Returns (results, elapsed) with elapsed in microseconds, measured from
        just before the first transmission until the reply was recognised.
        """
        if timeout is None:
            timeout = self.timeout
        xid = self.next_xid()
        data = pack_call(xid, self.program, self.version, procedure, args)

        start = now()
        results = self.exchange(data, xid, start + timeout / 1000.0)
        elapsed = now() - start
        return results, int(elapsed * 1000000)

    def call_null(self, timeout=None):
        return self.call(NFSPROC_NULL, timeout=timeout)[1]

    def match(self, data, xid):
        """Return the results of a reply to xid, or None for anything else."""
        try:
            rxid = reply_xid(data)
            if rxid != xid:
                logger.debug("%s: ignoring reply xid=%d (expecting %d)", self.endpoint, rxid, xid)
                return None
            return unpack_reply(data)[1]
        except MalformedReply as e:
            logger.warning("%s: malformed reply: %s", self.endpoint, e)
            return None

    def close(self):
        if self.socket is not None:
            self.socket.close()
            self.socket = None


class udpSession(rpcSession):

    def connect(self):
        logger.debug("connect(udp, %s)", self.endpoint)
        try:
            self.socket = socket.socket(self.endpoint.family, socket.SOCK_DGRAM, socket.IPPROTO_UDP)
            self.socket.connect((self.endpoint.address, self.endpoint.port))
        except OSError as e:
            self.close()
            raise TransportSetupError("clntudp_create: %s: %s" % (self.endpoint, e))

    def send(self, data):
        logger.debug("UDP.TX %s", binascii.hexlify(data))
        try:
            self.socket.send(data)
        except OSError as e:
            raise ConnectionLost("RPC: Unable to send; %s" % e)

    def receive(self):
        try:
            data = self.socket.recv(BUFSIZE)
        except OSError as e:
            # ICMP port unreachable shows up here on a connected socket
            raise ConnectionLost("RPC: Unable to receive; %s" % e)
        logger.debug("UDP.RX %s (%d bytes)", binascii.hexlify(data), len(data))
        return data

    def exchange(self, data, xid, deadline):
        wait = self.retry / 1000.0 if self.retry > 0 else deadline - now()
        while True:
            self.send(data)
            results = self.wait_reply(xid, min(now() + wait, deadline))
            if results is not None:
                return results
            if now() >= deadline:
                raise CallTimeout()
            wait = wait * 2
            logger.debug("%s: retransmit xid=%d", self.endpoint, xid)

    def wait_reply(self, xid, until):
        while True:
            remaining = until - now()
            if remaining <= 0:
                return None
            readable = select.select([self.socket], [], [], remaining)[0]
            if not readable:
                return None
            results = self.match(self.receive(), xid)
            if results is not None:
                return results


class tcpSession(rpcSession):

    def __init__(self, *args, **kwargs):
        rpcSession.__init__(self, *args, **kwargs)
        self.partial = False

    def connect(self, timeout=None):
        """Connect within timeout seconds, by default the session timeout."""
        if timeout is None:
            timeout = self.timeout / 1000.0
        logger.debug("connect(tcp, %s)", self.endpoint)
        try:
            self.socket = socket.create_connection((self.endpoint.address, self.endpoint.port), timeout)
        except OSError as e:
            self.close()
            raise TransportSetupError("clnttcp_create: %s: %s" % (self.endpoint, e))

    def send(self, data):
        logger.debug("TCP.TX %s", binascii.hexlify(data))
        try:
            self.socket.sendall(data)
        except OSError as e:
            self.close()
            raise ConnectionLost("RPC: Unable to send; %s" % e)

    def receive(self, size, deadline):
        data = b''
        while len(data) < size:
            remaining = deadline - now()
            if remaining <= 0:
                raise CallTimeout()
            self.socket.settimeout(remaining)
            try:
                chunk = self.socket.recv(size - len(data))
            except socket.timeout:
                raise CallTimeout()
            except OSError as e:
                self.close()
                raise ConnectionLost("RPC: Unable to receive; %s" % e)
            if not chunk:
                self.close()
                raise ConnectionLost("RPC: Unable to receive; connection closed by %s" % self.endpoint)
            self.partial = True
            data += chunk
        return data

    def read_record(self, deadline):
        self.partial = False
        message = b''
        last = False
        while not last:
            last, length = fragment_header(self.receive(4, deadline))
            message += self.receive(length, deadline)
        logger.debug("TCP.RX %s (%d bytes)", binascii.hexlify(message), len(message))
        return message

    def exchange(self, data, xid, deadline):
        if self.socket is None:
            # the previous connection was lost, try once more per call
            try:
                remaining = deadline - now()
                if remaining <= 0:
                    raise CallTimeout()
                self.connect(remaining)
            except TransportSetupError as e:
                raise ConnectionLost(str(e))
        self.send(record(data))
        while True:
            try:
                message = self.read_record(deadline)
            except CallTimeout:
                # a half read record leaves the stream out of sync
                if self.partial:
                    self.close()
                raise
            results = self.match(message, xid)
            if results is not None:
                return results


SESSIONS = {"udp": udpSession, "tcp": tcpSession}


def open_session(endpoint, version=VERSION_DEFAULT, timeout=TIMEOUT_DEFAULT, retry=RETRY_DEFAULT, pmap_port=PMAP_PORT):
    """
    Create and connect the session for an NFS endpoint.

    A zero port is looked up with the portmapper on pmap_port first. Raises
    TransportSetupError when the endpoint can not be used.
    """
    session_class = SESSIONS[endpoint.protocol]

    if not endpoint.port:
        pmap = session_class(endpoint.with_port(pmap_port), PMAP_PROGRAM, PMAP_VERSION, timeout, retry)
        pmap.connect()
        try:
            port = getport(pmap, NFS_PROGRAM, version, endpoint.protocol)
        except RpcError as e:
            raise TransportSetupError("portmapper: %s: %s" % (endpoint.address, e))
        finally:
            pmap.close()
        if not port:
            raise TransportSetupError("portmapper: %s: program %d version %d not registered for %s" % (
                endpoint.address, NFS_PROGRAM, version, endpoint.protocol))
        logger.info("%s: portmapper returned port %d", endpoint.address, port)
        endpoint = endpoint.with_port(port)

    session = session_class(endpoint, NFS_PROGRAM, version, timeout, retry)
    session.connect()
    return session
