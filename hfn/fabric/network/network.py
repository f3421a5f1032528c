import logging

from hfn.fabric.errors import InvalidArgument
from hfn.fabric.network.contract import Contract

_logger = logging.getLogger(__name__)


class Network(object):
    """A channel as seen through a connected gateway."""

    def __init__(self, gateway, channel):
        _logger.debug(f'Network.const - channel: {getattr(channel, "name", channel)}')

        self.gateway = gateway
        self.channel = channel
        self.discoveryService = None
        self._contracts = {}
        self._initialized = False

    @property
    def name(self):
        return self.channel.name

    def getGateway(self):
        return self.gateway

    def getChannel(self):
        return self.channel

    def _initialize(self):
        method = '_initialize'

        if self._initialized:
            _logger.debug(f'{method} - already initialized')
            return

        discovery = self.gateway.getOptions().get('discovery', {})
        if discovery.get('enabled'):
            if self.channel.getDiscoverers():
                self.discoveryService = self.channel.newDiscoveryService(self.channel.name)
                _logger.debug(f'{method} - {self.name} initialized with discovery')
            else:
                _logger.warning(f'{method} - discovery enabled but channel {self.name} has no discovery peers,'
                                f' using static endorsing peers')
        else:
            _logger.debug(f'{method} - {self.name} initialized without discovery')

        self._initialized = True

    def getContract(self, chaincodeId, name=None, collections=None):
        if not isinstance(chaincodeId, str) or not chaincodeId:
            raise InvalidArgument('"chaincodeId" must be a non-empty string')

        key = (chaincodeId, name or '', tuple(collections or ()))
        contract = self._contracts.get(key)
        if not contract:
            _logger.debug(f'getContract - creating contract {key}')
            contract = Contract(self, chaincodeId, name, collections)
            self._contracts[key] = contract

        return contract

    def close(self):
        if self.discoveryService:
            self.discoveryService.close()
        self.discoveryService = None
        self._contracts.clear()
        self._initialized = False

    def __str__(self):
        return f'Network: {self.name}'
