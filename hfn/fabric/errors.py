class InvalidArgument(ValueError):
    pass


class DuplicatePeer(Exception):
    pass


class DiscoveryError(Exception):
    pass


class EndorsementError(Exception):
    pass


class CommitError(Exception):
    pass
