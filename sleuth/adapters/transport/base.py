class HostTransport:
    """Host-provided inference relay.

    Outbound: post_message() hands a JSON text payload to the host.
    Inbound: the host looks up handlers by name in `callbacks` and calls whichever
    it knows about. The host may also replace or drop entries, so callers re-bind
    before every send.
    """

    def __init__(self):
        self.callbacks: dict = {}

    def post_message(self, payload: str):
        """Post one request. May raise synchronously; replies arrive later via callbacks."""
        raise NotImplementedError

    def bind(self, alias: str, handler):
        self.callbacks[alias] = handler

    def invoke(self, alias: str, data):
        """Call the handler bound under `alias`; None when nothing is bound there."""
        handler = self.callbacks.get(alias)
        if handler is None:
            return None
        return handler(data)
