import struct

from nfsping.constants import (RPC_VERSION, CALL, REPLY, MSG_ACCEPTED, MSG_DENIED, SUCCESS, PROG_UNAVAIL,
                               PROG_MISMATCH, PROC_UNAVAIL, GARBAGE_ARGS, SYSTEM_ERR, RPC_MISMATCH,
                               AUTH_ERROR, AUTH_NONE, LAST_FRAGMENT)


class RpcError(Exception):
    """Base class for everything that can go wrong with a single RPC call."""


class TransportSetupError(RpcError):
    """The socket could not be created or connected; the target is unusable."""


class CallTimeout(RpcError):

    def __str__(self):
        return "RPC: Timed out"


class ConnectionLost(RpcError):
    pass


class RpcRejected(RpcError):
    pass


class MalformedReply(RpcError):
    pass


ACCEPT_ERRORS = {
    PROG_UNAVAIL: "Program unavailable",
    PROG_MISMATCH: "Program/version mismatch",
    PROC_UNAVAIL: "Procedure unavailable",
    GARBAGE_ARGS: "Server can't decode arguments",
    SYSTEM_ERR: "Remote system error",
}

AUTH_ERRORS = {
    1: "bad credential (seal broken)",
    2: "client must begin new session",
    3: "bad verifier (seal broken)",
    4: "verifier expired or replayed",
    5: "rejected for security reasons",
    6: "bogus credential",
    7: "bogus verifier",
}


def pack_call(xid, program, version, procedure, args=b''):
    """
    Encode an RPC call message with AUTH_NONE credential and verifier.
    """
    return struct.pack('!10I', xid, CALL, RPC_VERSION, program, version, procedure,
                       AUTH_NONE, 0, AUTH_NONE, 0) + args


def record(data):
    """Wrap a message into a single, last fragment for RPC over TCP."""
    return struct.pack('!I', LAST_FRAGMENT | len(data)) + data


def fragment_header(data):
    """Return (last, length) of a record marking header."""
    header = struct.unpack('!I', data)[0]
    return bool(header & LAST_FRAGMENT), header & ~LAST_FRAGMENT


def reply_xid(data):
    if len(data) < 4:
        raise MalformedReply("short reply: %d bytes" % len(data))
    return struct.unpack('!I', data[0:4])[0]


def unpack_reply(data):
    """
    Decode an RPC reply message.

    Returns (xid, results) where results are the procedure's result bytes.
    Raises RpcRejected when the server denied or did not accept the call,
    MalformedReply when the message can not be decoded.
    """
    try:
        xid, mtype, stat = struct.unpack('!3I', data[0:12])
    except struct.error:
        raise MalformedReply("short reply: %d bytes" % len(data))
    if mtype != REPLY:
        raise MalformedReply("xid %d: message type %d is not a reply" % (xid, mtype))

    if stat == MSG_DENIED:
        try:
            reason = struct.unpack('!I', data[12:16])[0]
            if reason == RPC_MISMATCH:
                low, high = struct.unpack('!2I', data[16:24])
                raise RpcRejected("RPC: Incompatible versions of RPC; low version = %d, high version = %d" % (low, high))
            if reason == AUTH_ERROR:
                why = struct.unpack('!I', data[16:20])[0]
                raise RpcRejected("RPC: Authentication error; why = %s" % AUTH_ERRORS.get(why, why))
        except struct.error:
            raise MalformedReply("xid %d: truncated rejection" % xid)
        raise MalformedReply("xid %d: unknown reject status %d" % (xid, reason))

    if stat != MSG_ACCEPTED:
        raise MalformedReply("xid %d: unknown reply status %d" % (xid, stat))

    try:
        # verifier: flavor, length, opaque body padded to 4 bytes
        length = struct.unpack('!I', data[16:20])[0]
        offset = 20 + (length + 3) // 4 * 4
        accept = struct.unpack('!I', data[offset:offset + 4])[0]
    except struct.error:
        raise MalformedReply("xid %d: truncated accepted reply" % xid)
    offset += 4

    if accept == SUCCESS:
        return xid, data[offset:]
    if accept == PROG_MISMATCH and len(data) >= offset + 8:
        low, high = struct.unpack('!2I', data[offset:offset + 8])
        raise RpcRejected("RPC: Program/version mismatch; low version = %d, high version = %d" % (low, high))
    if accept in ACCEPT_ERRORS:
        raise RpcRejected("RPC: %s" % ACCEPT_ERRORS[accept])
    raise MalformedReply("xid %d: unknown accept status %d" % (xid, accept))
