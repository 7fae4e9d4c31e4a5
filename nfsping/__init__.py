#!/usr/bin/python

##############################################################################
#                                                                            #
#  Objective:                                                                #
#    Python implementation of nfsping: measure reachability and round-trip   #
#    latency of NFS servers by calling the NULL procedure of the NFS RPC     #
#    program (ONC RPC, RFC 5531), like ping does with ICMP echo.             #
#                                                                            #
#  Features supported:                                                       #
#    - NFS version 2 and 3                                                   #
#    - UDP (with retransmission) and TCP (record marking)                    #
#    - IPv4 and IPv6                                                         #
#    - portmapper lookup of the NFS port                                     #
#    - Basic Delay and Loss statistics, per probe history                    #
#                                                                            #
#  Modes of operation:                                                       #
#    - one-shot: report alive or dead after a single call                    #
#    - count: send a fixed number of calls per target                        #
#    - loop: send calls until interrupted                                    #
#                                                                            #
#  Limitations:                                                              #
#    Latency is measured in user space around the RPC exchange, values       #
#    include the local scheduling overhead of the Python interpreter.        #
#    Targets are probed one after the other, never in parallel.              #
#                                                                            #
#  Not yet supported:                                                        #
#    - authenticated RPC (AUTH_SYS, RPCSEC_GSS)                              #
#    - NFS version 4 (COMPOUND NULL)                                         #
#    - rpcbind versions 3 and 4                                              #
#                                                                            #
#  License:                                                                  #
#    Licensed under the BSD license                                          #
#                                                                            #
##############################################################################
