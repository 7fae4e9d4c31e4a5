import socket

# ONC RPC (RFC 5531)
RPC_VERSION = 2
CALL = 0
REPLY = 1

MSG_ACCEPTED = 0
MSG_DENIED = 1

SUCCESS = 0
PROG_UNAVAIL = 1
PROG_MISMATCH = 2
PROC_UNAVAIL = 3
GARBAGE_ARGS = 4
SYSTEM_ERR = 5

RPC_MISMATCH = 0
AUTH_ERROR = 1

AUTH_NONE = 0

LAST_FRAGMENT = 0x80000000

# programs
NFS_PROGRAM = 100003
NFSPROC_NULL = 0

PMAP_PROGRAM = 100000
PMAP_VERSION = 2
PMAPPROC_GETPORT = 3
PMAP_PORT = 111

NFS_PORT = 2049

PROTOCOLS = {"udp": socket.IPPROTO_UDP, "tcp": socket.IPPROTO_TCP}
SOCKTYPES = {"udp": socket.SOCK_DGRAM, "tcp": socket.SOCK_STREAM}
FAMILIES = {4: socket.AF_INET, 6: socket.AF_INET6}

# defaults, all in milliseconds
TIMEOUT_DEFAULT = 1000
RETRY_DEFAULT = 250
WAIT_DEFAULT = 25
SLEEP_DEFAULT = 1000

VERSION_DEFAULT = 3
BUFSIZE = 9216

# process exit codes
EXIT_SUCCESS = 0
EXIT_FAILURE = 1
EXIT_USAGE = 3
