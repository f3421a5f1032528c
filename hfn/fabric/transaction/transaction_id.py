import logging
import os
from hashlib import sha256

_logger = logging.getLogger(__name__)

NONCE_SIZE = 24


class TransactionID(object):

    def __init__(self, identity):
        _logger.debug('constructor - start')

        if not identity:
            raise Exception('Missing identity parameter')

        self._nonce = os.urandom(NONCE_SIZE)
        creator_bytes = identity.serialize()
        trans_bytes = self._nonce + creator_bytes
        self._transaction_id = sha256(trans_bytes).hexdigest()
        _logger.debug(f'const - transaction_id {self._transaction_id}')

    @property
    def transactionID(self):
        return self._transaction_id

    @property
    def nonce(self):
        return self._nonce

    def __str__(self):
        return self._transaction_id
