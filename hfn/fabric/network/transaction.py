import logging

from hfn.fabric.channel.discovery_service import isGoodResponse
from hfn.fabric.errors import EndorsementError, InvalidArgument

_logger = logging.getLogger(__name__)


class Transaction(object):
    """A named transaction function of a contract.

    Construction has no network side effect; every ``submit`` or ``evaluate``
    builds a new proposal with a fresh transaction id.
    """

    def __init__(self, contract, name):
        self._contract = contract
        self._name = name
        self._transient_map = {}
        self._endorsing_peers = None
        self._endorsing_orgs = None
        self._transaction_id = None

    def getName(self):
        return self._name

    def getContract(self):
        return self._contract

    def getTransactionId(self):
        return self._transaction_id

    def setTransient(self, transientMap):
        if not isinstance(transientMap, dict):
            raise InvalidArgument('"transientMap" must be a dict')
        self._transient_map = transientMap
        return self

    def setEndorsingPeers(self, peers):
        self._endorsing_peers = list(peers)
        self._endorsing_orgs = None
        return self

    def setEndorsingOrganizations(self, *mspids):
        self._endorsing_orgs = list(mspids)
        self._endorsing_peers = None
        return self

    def _newEndorsement(self, args):
        contract = self._contract
        network = contract.getNetwork()

        endorsement = network.getChannel().newEndorsement(contract.chaincodeId)
        for interest in contract.getDiscoveryInterests():
            collection_names = interest.get('collectionNames', [])
            if interest['name'] == contract.chaincodeId:
                for collection_name in collection_names:
                    endorsement.addCollectionInterest(collection_name)
                if interest.get('noPrivateReads'):
                    endorsement.setNoPrivateReads(True)
            else:
                endorsement.addChaincodeCollectionsInterest(interest['name'], *collection_names,
                                                            noPrivateReads=interest.get('noPrivateReads', False))

        endorsement.build(network.getGateway().identityContext, self._name, args, self._transient_map)
        self._transaction_id = endorsement.transactionId

        return endorsement

    async def _endorsementRouting(self, endorsement):
        method = '_endorsementRouting'

        if self._endorsing_peers:
            _logger.debug(f'{method} - {self._name} using endorsing peers')
            return {'targets': self._endorsing_peers}

        handler = await self._contract.getDiscoveryHandler(endorsement)
        if handler:
            _logger.debug(f'{method} - {self._name} using discovery handler')
            return {'handler': handler, 'requiredOrgs': self._endorsing_orgs}

        endorsers = self._contract.getNetwork().getChannel().getEndorsers()
        if self._endorsing_orgs:
            endorsers = [endorser for endorser in endorsers if endorser.mspid in self._endorsing_orgs]

        _logger.debug(f'{method} - {self._name} using {len(endorsers)} static endorsers')
        return {'targets': endorsers}

    def _queryTargets(self):
        if self._endorsing_peers:
            return self._endorsing_peers

        network = self._contract.getNetwork()
        channel = network.getChannel()
        mspid = network.getGateway().getIdentity().mspid

        org_peers = channel.getEndorsers(mspid)
        return org_peers + [peer for peer in channel.getEndorsers() if peer not in org_peers]

    async def submit(self, *args):
        method = 'submit'
        _logger.debug(f'{method} - start - {self._name}')

        network = self._contract.getNetwork()
        options = network.getGateway().getOptions().get('eventHandlerOptions', {})

        endorsement = self._newEndorsement(args)
        routing = await self._endorsementRouting(endorsement)
        responses = await endorsement.send(requestTimeout=options.get('endorseTimeout'), **routing)

        valid_responses = [response for response in responses if isGoodResponse(response)]
        if not valid_responses:
            invalid = [str(response) for response in responses]
            msg = f'No valid responses from any peers. Errors: {invalid}'
            _logger.error(f'{method} - {msg}')
            raise EndorsementError(msg)

        commit = endorsement.newCommit()
        await commit.send(network.getChannel().getCommitters(), options.get('commitTimeout'))

        _logger.debug(f'{method} - end - {self._name} tx {self._transaction_id}')
        return valid_responses[0]['response'].get('payload')

    async def evaluate(self, *args):
        method = 'evaluate'
        _logger.debug(f'{method} - start - {self._name}')

        options = self._contract.getNetwork().getGateway().getOptions().get('queryHandlerOptions', {})

        endorsement = self._newEndorsement(args)
        response = await endorsement.query(targets=self._queryTargets(), requestTimeout=options.get('timeout'))

        return response['response'].get('payload')

    def __str__(self):
        return f'Transaction: {self._name}'
