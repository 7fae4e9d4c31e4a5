import socket
import struct
import threading
from collections import deque

from nfsping.constants import REPLY, MSG_ACCEPTED, MSG_DENIED, SUCCESS, AUTH_NONE, LAST_FRAGMENT
from nfsping.rpc import CallTimeout, record


def accepted(xid, stat=SUCCESS, results=b'', verifier=b''):
    padded = verifier + b'\0' * (-len(verifier) % 4)
    return struct.pack('!5I', xid, REPLY, MSG_ACCEPTED, AUTH_NONE, len(verifier)) + padded + \
        struct.pack('!I', stat) + results


def denied(xid, reason, *details):
    return struct.pack('!4I', xid, REPLY, MSG_DENIED, reason) + struct.pack('!%dI' % len(details), *details)


def null_reply(xid, data):
    return [accepted(xid)]


class udpResponder(threading.Thread):
    """
    Answers RPC calls on a loopback UDP port.

    reply(xid, data) returns the datagrams to send back; the first `drop`
    requests are not answered at all.
    """

    def __init__(self, reply=null_reply, drop=0):
        threading.Thread.__init__(self, daemon=True)
        self.socket = socket.socket(socket.AF_INET, socket.SOCK_DGRAM)
        self.socket.bind(("127.0.0.1", 0))
        self.socket.settimeout(0.05)
        self.port = self.socket.getsockname()[1]
        self.reply = reply
        self.drop = drop
        self.requests = []
        self.running = True

    def run(self):
        while self.running:
            try:
                data, address = self.socket.recvfrom(9216)
            except socket.timeout:
                continue
            except OSError:
                break
            self.requests.append(data)
            if len(self.requests) <= self.drop:
                continue
            xid = struct.unpack('!I', data[0:4])[0]
            for datagram in self.reply(xid, data):
                self.socket.sendto(datagram, address)

    def stop(self):
        self.running = False
        self.join()
        self.socket.close()


class tcpResponder(threading.Thread):
    """
    Answers RPC calls on a loopback TCP port, one connection at a time.

    With split the reply goes out as two record fragments; close_after
    drops the connection instead of answering the n-th request.
    """

    def __init__(self, reply=null_reply, split=False, close_after=None):
        threading.Thread.__init__(self, daemon=True)
        self.socket = socket.socket(socket.AF_INET, socket.SOCK_STREAM)
        self.socket.setsockopt(socket.SOL_SOCKET, socket.SO_REUSEADDR, 1)
        self.socket.bind(("127.0.0.1", 0))
        self.socket.listen(5)
        self.socket.settimeout(0.05)
        self.port = self.socket.getsockname()[1]
        self.reply = reply
        self.split = split
        self.close_after = close_after
        self.requests = []
        self.connections = 0
        self.running = True

    def run(self):
        while self.running:
            try:
                conn, address = self.socket.accept()
            except socket.timeout:
                continue
            except OSError:
                break
            self.connections += 1
            with conn:
                self.serve(conn)

    def recv_exact(self, conn, size):
        data = b''
        while len(data) < size and self.running:
            try:
                chunk = conn.recv(size - len(data))
            except socket.timeout:
                continue
            if not chunk:
                return b''
            data += chunk
        return data

    def serve(self, conn):
        conn.settimeout(0.05)
        while self.running:
            header = self.recv_exact(conn, 4)
            if len(header) < 4:
                return
            length = struct.unpack('!I', header)[0] & ~LAST_FRAGMENT
            data = self.recv_exact(conn, length)
            self.requests.append(data)
            if self.close_after is not None and len(self.requests) == self.close_after:
                return
            xid = struct.unpack('!I', data[0:4])[0]
            for message in self.reply(xid, data):
                if self.split:
                    half = len(message) // 2
                    conn.sendall(struct.pack('!I', half) + message[:half])
                    conn.sendall(record(message[half:]))
                else:
                    conn.sendall(record(message))

    def stop(self):
        self.running = False
        self.join()
        self.socket.close()


class FakeSession:
    """
    Scripted stand-in for an RPC session.

    Each call_null() pops the next script item: an int is a latency in
    microseconds, an exception is raised, a callable is called and its
    result used. An empty script times out.
    """

    def __init__(self, script=()):
        self.script = deque(script)
        self.calls = 0
        self.closed = False

    def call_null(self, timeout=None):
        self.calls += 1
        item = self.script.popleft() if self.script else CallTimeout()
        if callable(item) and not isinstance(item, Exception):
            item = item()
        if isinstance(item, Exception):
            raise item
        return item

    def close(self):
        self.closed = True
