import datetime
import json
from hashlib import sha256

import pytest
from cryptography import x509
from cryptography.hazmat.primitives import hashes, serialization
from cryptography.hazmat.primitives.asymmetric import ec
from cryptography.x509.oid import NameOID

from hfn.fabric.errors import InvalidArgument
from hfn.fabric.msp.identity import Identity, IdentityContext
from hfn.fabric.transaction.transaction_id import NONCE_SIZE, TransactionID


@pytest.fixture(scope='module')
def certificate():
    key = ec.generate_private_key(ec.SECP256R1())
    name = x509.Name([x509.NameAttribute(NameOID.COMMON_NAME, 'user1')])
    now = datetime.datetime.utcnow()
    cert = x509.CertificateBuilder() \
        .subject_name(name) \
        .issuer_name(name) \
        .public_key(key.public_key()) \
        .serial_number(x509.random_serial_number()) \
        .not_valid_before(now) \
        .not_valid_after(now + datetime.timedelta(days=1)) \
        .sign(key, hashes.SHA256())
    return cert


def test_identity_requires_fields():
    with pytest.raises(InvalidArgument, match='certificate'):
        Identity('Org1MSP', None)
    with pytest.raises(InvalidArgument, match='mspId'):
        Identity(None, 'certificate')


def test_identity_from_object():
    identity = Identity('Org1MSP', 'certificate')
    assert Identity.fromObject(identity) is identity
    assert Identity.fromObject({'mspId': 'Org1MSP', 'credentials': {'certificate': 'certificate'}}) == identity
    with pytest.raises(InvalidArgument):
        Identity.fromObject('Org1MSP')


def test_serialize():
    serialized = Identity('Org1MSP', b'certificate').serialize()
    assert json.loads(serialized) == {'mspid': 'Org1MSP', 'id_bytes': 'certificate'}


def test_client_cert_hash(certificate):
    pem = certificate.public_bytes(serialization.Encoding.PEM).decode()
    der = certificate.public_bytes(serialization.Encoding.DER)

    assert Identity('Org1MSP', pem).getClientCertHash() == sha256(der).digest()


def test_client_cert_hash_without_pem():
    assert Identity('Org1MSP', 'not a certificate').getClientCertHash() is None


def test_transaction_id():
    identity = Identity('Org1MSP', 'certificate')
    tx_id = TransactionID(identity)

    assert len(tx_id.nonce) == NONCE_SIZE
    assert tx_id.transactionID == sha256(tx_id.nonce + identity.serialize()).hexdigest()
    assert str(tx_id) == tx_id.transactionID
    assert TransactionID(identity).transactionID != tx_id.transactionID


def test_transaction_id_requires_identity():
    with pytest.raises(Exception, match='Missing identity'):
        TransactionID(None)


def test_identity_context():
    context = IdentityContext(Identity('Org1MSP', 'certificate'))
    assert context.transactionId is None
    assert context.nonce is None

    first = context.calculateTransactionId()
    assert context.transactionId == first.transactionID
    assert context.nonce == first.nonce

    second = context.calculateTransactionId()
    assert second.transactionID != first.transactionID
    assert context.mspid == 'Org1MSP'
