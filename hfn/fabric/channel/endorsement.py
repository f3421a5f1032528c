import asyncio
import logging

from hfn.fabric.channel.discovery_service import isGoodResponse
from hfn.fabric.errors import CommitError, EndorsementError, InvalidArgument

_logger = logging.getLogger(__name__)


def _encode(arg):
    if isinstance(arg, bytes):
        return arg
    if isinstance(arg, str):
        return arg.encode()
    raise InvalidArgument(f'Transaction arguments must be str or bytes, got {type(arg).__name__}')


class Endorsement(object):
    """A chaincode proposal waiting to be endorsed."""

    def __init__(self, chaincodeId, channel):
        if not chaincodeId:
            raise InvalidArgument('Missing chaincodeId parameter')

        self._chaincode_id = chaincodeId
        self._channel = channel
        self._collection_names = []
        self._chaincode_interests = []
        self._no_private_reads = False
        self._proposal = None
        self._responses = []

    @property
    def chaincodeId(self):
        return self._chaincode_id

    @property
    def proposal(self):
        return self._proposal

    @property
    def responses(self):
        return self._responses

    @property
    def transactionId(self):
        if self._proposal:
            return self._proposal['tx_id']
        return None

    def addCollectionInterest(self, collectionName):
        if not isinstance(collectionName, str) or not collectionName:
            raise InvalidArgument('Invalid collectionName parameter')
        if collectionName not in self._collection_names:
            self._collection_names.append(collectionName)
        return self

    def addChaincodeCollectionsInterest(self, chaincodeId, *collectionNames, noPrivateReads=False):
        if not isinstance(chaincodeId, str) or not chaincodeId:
            raise InvalidArgument('Invalid chaincodeId parameter')

        interest = {'name': chaincodeId}
        if collectionNames:
            interest['collectionNames'] = list(collectionNames)
        if noPrivateReads:
            interest['noPrivateReads'] = True
        self._chaincode_interests.append(interest)
        return self

    def setNoPrivateReads(self, noPrivateReads):
        self._no_private_reads = bool(noPrivateReads)
        return self

    def buildProposalInterest(self):
        method = 'buildProposalInterest'
        _logger.debug(f'{method} - start')

        interest = {'name': self._chaincode_id}
        if self._collection_names:
            interest['collectionNames'] = list(self._collection_names)
        if self._no_private_reads:
            interest['noPrivateReads'] = True

        interests = [interest]
        for chaincode_interest in self._chaincode_interests:
            if chaincode_interest['name'] != self._chaincode_id:
                interests.append(dict(chaincode_interest))

        return interests

    def build(self, identityContext, fcn, args=None, transientMap=None):
        method = 'build'
        _logger.debug(f'{method} - start - {self._chaincode_id} {fcn}')

        if not fcn:
            raise InvalidArgument('Missing fcn parameter')

        tx_id = identityContext.calculateTransactionId()
        self._proposal = {
            'channel_id': self._channel.name,
            'chaincode_id': self._chaincode_id,
            'fcn': fcn,
            'args': [_encode(fcn)] + [_encode(arg) for arg in (args or [])],
            'transient_map': dict(transientMap or {}),
            'tx_id': tx_id.transactionID,
            'nonce': tx_id.nonce,
            'creator': identityContext.serializeIdentity(),
        }
        self._responses = []

        return self._proposal

    def _checkBuilt(self):
        if not self._proposal:
            raise EndorsementError('Proposal has not been built')

    async def send(self, handler=None, targets=None, requestTimeout=None, requiredOrgs=None):
        method = 'send'
        _logger.debug(f'{method} - start - tx {self.transactionId}')

        self._checkBuilt()

        if handler:
            _logger.debug(f'{method} - endorsing with discovery handler')
            self._responses = await handler.endorse(self._proposal, requestTimeout, requiredOrgs)
        elif targets:
            _logger.debug(f'{method} - endorsing with {len(targets)} targets')
            self._responses = await asyncio.gather(
                *[target.sendProposal(self._proposal, requestTimeout) for target in targets],
                return_exceptions=True)
        else:
            raise EndorsementError('Missing targets parameter')

        return self._responses

    async def query(self, handler=None, targets=None, requestTimeout=None):
        method = 'query'
        _logger.debug(f'{method} - start - tx {self.transactionId}')

        self._checkBuilt()

        if handler:
            response = await handler.query(self._proposal, requestTimeout)
            self._responses = [response]
            return response

        if not targets:
            raise EndorsementError('Missing targets parameter')

        errors = []
        for target in targets:
            try:
                response = await target.sendProposal(self._proposal, requestTimeout)
            except Exception as e:
                _logger.error(f'{method} - target {target.name} failed {e}')
                errors.append(e)
                continue
            if isGoodResponse(response):
                self._responses = [response]
                return response
            errors.append(response)

        raise EndorsementError(f'Query failed on all targets: {errors}')

    def newCommit(self):
        return Commit(self)


class Commit(object):
    """Broadcasts an endorsed proposal to the ordering service."""

    def __init__(self, endorsement):
        self._endorsement = endorsement
        self._envelope = None

    @property
    def envelope(self):
        return self._envelope

    def build(self):
        proposal = self._endorsement.proposal
        if not proposal:
            raise CommitError('Endorsement has not been built')

        endorsements = [response for response in self._endorsement.responses if isGoodResponse(response)]
        if not endorsements:
            raise CommitError('no valid endorsements found')

        self._envelope = {
            'tx_id': proposal['tx_id'],
            'proposal': proposal,
            'endorsements': endorsements,
        }
        return self._envelope

    async def send(self, targets, requestTimeout=None):
        method = 'send'

        if not self._envelope:
            self.build()

        if not targets:
            raise CommitError('Missing committer targets')

        _logger.debug(f'{method} - start - tx {self._envelope["tx_id"]}')

        final_error = None
        for target in targets:
            try:
                result = await target.sendBroadcast(self._envelope, requestTimeout)
            except Exception as e:
                _logger.error(f'{method} - committer {target.name} failed {e}')
                final_error = e
                continue
            if result and result.get('status') == 'SUCCESS':
                return result
            final_error = result

        raise CommitError(f'Failed to send transaction to the committers: {final_error}')
