import inspect
import logging
from collections import namedtuple
from enum import Enum

_logger = logging.getLogger(__name__)


class DiscoveryScope(Enum):
    CONTRACT = 'contract'
    NETWORK = 'network'
    NONE = 'none'


ResolvedDiscovery = namedtuple('ResolvedDiscovery', ['scope', 'service'])


class DiscoveryResolver(object):
    """Decides which discovery service routes a contract's proposals.

    The contract's own service wins over the network's; with neither the
    contract runs with static endorsing peers.
    """

    def __init__(self, contract):
        self._contract = contract

    def resolve(self):
        contract = self._contract
        if contract.discoveryService:
            return ResolvedDiscovery(DiscoveryScope.CONTRACT, contract.discoveryService)

        network_service = getattr(contract.getNetwork(), 'discoveryService', None)
        if network_service:
            return ResolvedDiscovery(DiscoveryScope.NETWORK, network_service)

        return ResolvedDiscovery(DiscoveryScope.NONE, None)

    async def getHandler(self, endorsement):
        method = 'getHandler'

        resolved = self.resolve()
        _logger.debug(f'{method} - {self._contract.chaincodeId} discovery scope: {resolved.scope.value}')

        if resolved.scope is DiscoveryScope.NONE:
            return None

        gateway = self._contract.getNetwork().getGateway()
        options = gateway.getOptions()
        interests = endorsement.buildProposalInterest()

        handler = resolved.service.newHandler(
            gateway.identityContext,
            options.get('eventHandlerOptions'),
            options.get('discovery', {}).get('asLocalhost'),
            interests)
        if inspect.isawaitable(handler):
            handler = await handler

        return handler
