class DistributorException(Exception):
    """Base class for every error that aborts a distributor call"""

    pass


class NotEnoughTokensToDistribute(DistributorException):
    """Raise if a distribution is funded with a zero amount"""

    pass


class InvalidRoot(DistributorException):
    """Raise if a distribution is funded with the zero root"""

    pass


class StillDistributing(DistributorException):
    """Raise if a token is funded before its previous distribution is exhausted"""

    pass


class AlreadyClaimed(DistributorException):
    """Raise if a commit finds one of its bits already set for the claimer"""

    pass


class InvalidProof(DistributorException):
    """Raise if a merkle proof does not reconstruct the batch root"""

    pass


class InvalidTokenIndex(DistributorException):
    """Raise if a claim points outside of the token list passed with it"""

    pass


class InsufficientRemaining(DistributorException):
    """Raise if a commit would debit more than the distribution has left"""

    pass


class TransferFailed(DistributorException):
    """Raise if the ledger refuses to move tokens"""

    pass


class BadConfigException(Exception):
    pass


class MissingEnvironmentVariableException(Exception):
    pass


class MissingDBException(Exception):
    pass
