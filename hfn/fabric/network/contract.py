import logging

from hfn.fabric.errors import InvalidArgument
from hfn.fabric.network.discovery_interests import DiscoveryInterestSet
from hfn.fabric.network.discovery_resolver import DiscoveryResolver
from hfn.fabric.network.transaction import Transaction

_logger = logging.getLogger(__name__)


def _verifyNamespace(namespace):
    if namespace is not None and (not isinstance(namespace, str) or not namespace):
        raise InvalidArgument('Namespace must be a non-empty string')


class Contract(object):
    """A smart contract deployed to a network's channel.

    Transactions created here carry the contract's discovery interests, and
    are routed through the contract's discovery service when it has one,
    else through the network's one, else to static endorsing peers.
    """

    def __init__(self, network, chaincodeId, namespace=None, collections=None):
        _logger.debug(f'constructor - chaincodeId: {chaincodeId} namespace: {namespace}')

        if not network:
            raise InvalidArgument('Missing required parameter "network"')
        if not isinstance(chaincodeId, str) or not chaincodeId:
            raise InvalidArgument('"chaincodeId" must be a non-empty string')
        _verifyNamespace(namespace)
        if collections is not None and (isinstance(collections, str)
                                        or not all(isinstance(c, str) for c in collections)):
            raise InvalidArgument('"collections" must be a list of strings')

        self._network = network
        self._chaincode_id = chaincodeId
        self._collections = list(collections or [])
        self._interests = DiscoveryInterestSet(chaincodeId, self._collections)
        self._resolver = DiscoveryResolver(self)

        self.namespace = namespace
        self.discoveryService = None

    @property
    def chaincodeId(self):
        return self._chaincode_id

    @property
    def collections(self):
        return list(self._collections)

    @property
    def discoveryInterests(self):
        return self._interests.snapshot()

    def getNetwork(self):
        return self._network

    def createTransaction(self, name):
        if not isinstance(name, str) or not name:
            raise InvalidArgument('Transaction name must be a non-empty string: name')

        qualified_name = f'{self.namespace}:{name}' if self.namespace else name
        _logger.debug(f'createTransaction - {qualified_name}')

        return Transaction(self, qualified_name)

    async def submitTransaction(self, name, *args):
        return await self.createTransaction(name).submit(*args)

    async def evaluateTransaction(self, name, *args):
        return await self.createTransaction(name).evaluate(*args)

    def getDiscoveryInterests(self):
        return self._interests.getInterests()

    def addDiscoveryInterest(self, interest):
        self._interests.add(interest)
        return self

    def resolveDiscoveryService(self):
        return self._resolver.resolve()

    async def getDiscoveryHandler(self, endorsement):
        return await self._resolver.getHandler(endorsement)

    def newDiscoveryService(self):
        """Give this contract its own discovery service, taking the
        discovery targets of the network's service when it has one.
        """
        network = self._network
        service = network.getChannel().newDiscoveryService(self._chaincode_id)

        network_service = getattr(network, 'discoveryService', None)
        if network_service:
            service.targets = network_service.targets

        _logger.debug(f'newDiscoveryService - contract {self._chaincode_id} now has its own discovery service')
        self.discoveryService = service
        return service

    def __str__(self):
        return f'Contract: {self._chaincode_id} namespace: {self.namespace}'
