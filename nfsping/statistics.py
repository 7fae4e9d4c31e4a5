class pingStatistics:
    """
    Counters and latency aggregates of one target, all latencies in
    microseconds. With history enabled every attempt leaves one sample:
    the latency, or None when no reply arrived.
    """

    def __init__(self, history=False):
        self.sent = 0
        self.received = 0
        self.min = None
        self.max = None
        self.avg = None
        self.history = [] if history else None

    def add(self, us):
        self.received += 1

        if self.received == 1:
            self.min = us
            self.max = us
            self.avg = float(us)
        else:
            self.min = min(self.min, us)
            self.max = max(self.max, us)
            self.avg = (self.avg * (self.received - 1) + us) / self.received

        if self.history is not None:
            self.history.append(us)

    def miss(self):
        if self.history is not None and self.sent > 0:
            self.history.append(None)

    @property
    def loss(self):
        if self.sent == 0:
            return 0.0
        return (self.sent - self.received) / float(self.sent) * 100
