import json
import logging
from hashlib import sha256

from cryptography import x509
from cryptography.hazmat.primitives import serialization

from hfn.fabric.errors import InvalidArgument
from hfn.fabric.transaction.transaction_id import TransactionID

_logger = logging.getLogger(__name__)


def pem_to_der(pem):
    if isinstance(pem, str):
        pem = pem.encode()
    certificate = x509.load_pem_x509_certificate(pem)
    return certificate.public_bytes(serialization.Encoding.DER)


class Identity(object):

    def __init__(self, mspId, certificate):

        if not certificate:
            raise InvalidArgument('Missing required parameter "certificate".')

        if not mspId:
            raise InvalidArgument('Missing required parameter "mspId".')

        self._certificate = certificate
        self._mspId = mspId

    @staticmethod
    def fromObject(identity):
        if isinstance(identity, Identity):
            return identity
        if not isinstance(identity, dict):
            raise InvalidArgument('"identity" must be an Identity or a dict with "mspId" and "credentials"')

        credentials = identity.get('credentials') or {}
        return Identity(identity.get('mspId'), credentials.get('certificate'))

    @property
    def mspid(self):
        return self._mspId

    @property
    def certificate(self):
        return self._certificate

    def getClientCertHash(self):
        try:
            return sha256(pem_to_der(self._certificate)).digest()
        except ValueError as e:
            _logger.debug(f'getClientCertHash - certificate is not PEM encoded: {e}')
            return None

    def serialize(self):
        certificate = self._certificate
        if isinstance(certificate, bytes):
            certificate = certificate.decode()

        serialized_identity = {
            'mspid': self._mspId,
            'id_bytes': certificate,
        }
        return json.dumps(serialized_identity, sort_keys=True).encode()

    def __eq__(self, other):
        if not isinstance(other, Identity):
            return NotImplemented
        return self._mspId == other._mspId and self._certificate == other._certificate

    def __hash__(self):
        return hash((self._mspId, self._certificate))

    def __str__(self):
        return f'Identity: {self._mspId}'


class IdentityContext(object):
    """Holds the identity used to sign proposals and discovery queries,
    and the transaction id computed for the current request.
    """

    def __init__(self, identity):
        if not identity:
            raise InvalidArgument('Missing required parameter "identity".')

        self._identity = identity
        self._transaction_id = None

    @property
    def identity(self):
        return self._identity

    @property
    def mspid(self):
        return self._identity.mspid

    @property
    def transactionId(self):
        if self._transaction_id:
            return self._transaction_id.transactionID
        return None

    @property
    def nonce(self):
        if self._transaction_id:
            return self._transaction_id.nonce
        return None

    def calculateTransactionId(self):
        self._transaction_id = TransactionID(self._identity)
        return self._transaction_id

    def serializeIdentity(self):
        return self._identity.serialize()

    def getClientCertHash(self):
        return self._identity.getClientCertHash()

    def __str__(self):
        return f'IdentityContext: {self.mspid} txId: {self.transactionId}'
